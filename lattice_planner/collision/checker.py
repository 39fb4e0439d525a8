# lattice_planner/collision/checker.py
from typing import Tuple

import numpy as np

from lattice_planner.types import Configuration, HeadingSet, State
from lattice_planner.primitives.primitive import MotionPrimitive
from .config import CollisionConfig, CollisionMethod
from .geometry import polygon_cells
from .footprint import FootprintModel


class CollisionChecker:
    """
    检查 primitive / 位姿 / 整条路径是否与地图冲突。

    RASTER: 只看 primitive 预计算的扫掠格子，代价与扫掠格子数成正比。
    POLYGON: 在每个采样位姿上用 SAT 检查车辆多边形与障碍格子，慢，用于验证。
    所有方法都把越界视为碰撞。
    """

    def __init__(self, vehicle, headings: HeadingSet, resolution: float,
                 config: CollisionConfig = None):
        self.vehicle = vehicle
        self.headings = headings
        self.resolution = resolution
        self.config = config or CollisionConfig()
        # 这一步计算量不小，只做一次
        self.footprint_model = FootprintModel(vehicle, headings, resolution)

    # ------------------------------------------------------------------
    def is_primitive_free(self, start_cell: Tuple[int, int], primitive: MotionPrimitive,
                          grid_map) -> bool:
        """True 表示从 start_cell 执行 primitive 全程无碰撞"""
        if self.config.method == CollisionMethod.POLYGON:
            return self._is_primitive_free_polygon(start_cell, primitive, grid_map)

        ix, iy = start_cell
        # --- Phase 1: Broad Phase (距离场粗筛) ---
        if self.config.use_clearance_broad_phase and grid_map.in_bounds(ix, iy):
            if grid_map.clearance_cells(ix, iy) > primitive.swept_radius:
                return True

        # --- Phase 2: Narrow Phase (逐格查表) ---
        return self._cells_free(primitive.swept_cells + np.array([ix, iy], dtype=np.int32),
                                grid_map)

    def is_configuration_free(self, config: Configuration, grid_map) -> bool:
        """车辆静止在 config 时的轮廓是否无碰撞"""
        if self.config.method == CollisionMethod.POLYGON:
            state = State(config.x, config.y, config.theta_rad)
            return not self.check(state, grid_map)
        cells = self.footprint_model.get_occupied_indices(config.ix, config.iy, config.itheta)
        return self._cells_free(cells, grid_map)

    def is_path_free(self, path, grid_map) -> bool:
        """
        验证完整路径 (PathStep 列表)：第一个位姿检查静止轮廓，
        之后每一步检查从上一位姿执行的 primitive。
        """
        if not path:
            return False
        if not self.is_configuration_free(path[0].configuration, grid_map):
            return False
        for prev, step in zip(path, path[1:]):
            if step.primitive is None:
                return False
            if not self.is_primitive_free(prev.configuration.cell, step.primitive, grid_map):
                return False
        return True

    def check(self, state: State, grid_map) -> bool:
        """
        统一入口：检查连续状态下车辆是否碰撞 (多边形 SAT)
        :return: True 表示碰撞 (不安全), False 表示安全
        """
        for poly in self.vehicle.footprint_at(state):
            if self._check_polygon_in_grid(poly, grid_map):
                return True
        return False

    # ------------------------------------------------------------------
    @staticmethod
    def _cells_free(cells: np.ndarray, grid_map) -> bool:
        xs = cells[:, 0]
        ys = cells[:, 1]
        inside = (xs >= 0) & (xs < grid_map.width) & (ys >= 0) & (ys < grid_map.height)
        if not np.all(inside):
            return False
        # data[y, x]：numpy 索引顺序是 (row, col)
        return not np.any(grid_map.blocked[ys, xs])

    def _is_primitive_free_polygon(self, start_cell, primitive: MotionPrimitive, grid_map) -> bool:
        cx, cy = grid_map.cell_to_world(*start_cell)
        for x, y, theta, steer in primitive.poses:
            if self.check(State(cx + x, cy + y, theta, steer), grid_map):
                return False
        return True

    def _check_polygon_in_grid(self, poly_coords: np.ndarray, grid_map) -> bool:
        """多边形接触到的格子里有障碍 (含越界格子) 即碰撞"""
        local = np.asarray(poly_coords, dtype=float) - grid_map.origin
        for ix, iy in polygon_cells(local, grid_map.resolution):
            if grid_map.is_occupied(int(ix), int(iy)):
                return True
        return False
