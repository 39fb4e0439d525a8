# lattice_planner/collision/footprint.py
import logging
from typing import List

import numpy as np

from lattice_planner.types import HeadingSet, State
from .geometry import polygon_cells

logger = logging.getLogger(__name__)


def rasterize_footprint(vehicle, theta_rad: float, resolution: float) -> np.ndarray:
    """静止时 (参考点在格子 (0, 0) 中心) 覆盖的格子，SAT 判定，接触也算"""
    half = resolution / 2.0
    cells = set()
    for poly in vehicle.footprint_at(State(half, half, theta_rad)):
        for cx, cy in polygon_cells(poly, resolution):
            cells.add((int(cx), int(cy)))
    return np.array(sorted(cells), dtype=np.int32).reshape(-1, 2)


class FootprintModel:
    """
    每个离散航向下，车辆静止在格子中心时覆盖的格子偏移 (dx, dy)。
    用于起终点检查，查表代替每次重新栅格化。
    """

    def __init__(self, vehicle, headings: HeadingSet, resolution: float):
        self.resolution = resolution
        self.headings = headings

        # 核心查找表：heading -> np.array([[dx, dy], ...])
        self.lookup_table: List[np.ndarray] = []
        for h in range(headings.num_headings):
            cells = rasterize_footprint(vehicle, headings.angle(h), resolution)
            cells.setflags(write=False)
            self.lookup_table.append(cells)
        logger.debug("Footprint table for '%s': %d headings", vehicle.model_id,
                     headings.num_headings)

    def get_occupied_indices(self, ix: int, iy: int, heading: int) -> np.ndarray:
        """
        运行时调用：返回 (ix, iy, heading) 覆盖的绝对网格坐标 (N, 2)
        """
        offsets = self.lookup_table[self.headings.wrap(heading)]
        return offsets + np.array([ix, iy], dtype=np.int32)
