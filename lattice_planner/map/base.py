# lattice_planner/map/base.py
from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

# 格子取值
FREE = 0
OCCUPIED = 1
UNKNOWN = -1


class MapBase(ABC):
    """
    规划用的二维栅格地图。

    坐标约定：
    - data[iy, ix]，ix 沿世界 x 轴，iy 沿世界 y 轴；
    - origin 是格子 (0, 0) 左下角的世界坐标；
    - 格子 (ix, iy) 覆盖 [origin + i*res, origin + (i+1)*res)，中心在 +res/2。
    地图外的格子一律按障碍处理。
    """

    @property
    @abstractmethod
    def data(self) -> np.ndarray:
        """(height, width) 的 int8 矩阵，取值 FREE / OCCUPIED / UNKNOWN"""

    @property
    @abstractmethod
    def resolution(self) -> float:
        pass

    @property
    @abstractmethod
    def origin(self) -> Tuple[float, float]:
        pass

    @property
    @abstractmethod
    def width(self) -> int:
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        pass

    @abstractmethod
    def in_bounds(self, ix: int, iy: int) -> bool:
        pass

    @abstractmethod
    def is_occupied(self, ix: int, iy: int) -> bool:
        """越界为 True；UNKNOWN 是否算占据由具体地图决定"""

    @abstractmethod
    def world_to_cell(self, x: float, y: float) -> Tuple[int, int]:
        """向下取整到所在格子，可能返回越界索引"""

    @abstractmethod
    def cell_to_world(self, ix: int, iy: int) -> Tuple[float, float]:
        """格子中心的世界坐标"""

    def is_occupied_at_point(self, x: float, y: float) -> bool:
        return self.is_occupied(*self.world_to_cell(x, y))

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """(xmin, xmax, ymin, ymax)，imshow 用"""
        ox, oy = self.origin
        return (ox, ox + self.width * self.resolution, oy, oy + self.height * self.resolution)
