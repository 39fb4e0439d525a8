# lattice_planner/map/occupancy_map.py
import math
from typing import Iterable, Optional, Tuple

import numpy as np
from scipy.ndimage import distance_transform_edt

from .base import MapBase, FREE, OCCUPIED, UNKNOWN


class OccupancyMap(MapBase):
    """
    只读的占据栅格快照。

    构造时复制数据并设为不可写；规划期间地图不会变化。
    需要更新时用 updated() 生成新的快照 (copy-on-write)。
    """

    def __init__(self,
                 width: int,
                 height: int,
                 resolution: float = 0.2,
                 origin: Tuple[float, float] = (0.0, 0.0),
                 data: Optional[np.ndarray] = None,
                 unknown_is_occupied: bool = True):
        if width <= 0 or height <= 0:
            raise ValueError(f"Map size must be positive, got {width}x{height}")
        if resolution <= 0:
            raise ValueError(f"Resolution must be positive, got {resolution}")

        self._width = int(width)
        self._height = int(height)
        self._resolution = float(resolution)
        self._origin = (float(origin[0]), float(origin[1]))
        self.unknown_is_occupied = unknown_is_occupied

        if data is None:
            grid = np.zeros((self._height, self._width), dtype=np.int8)
        else:
            grid = np.array(data, dtype=np.int8, copy=True)
            if grid.shape != (self._height, self._width):
                raise ValueError(
                    f"Data shape {grid.shape} does not match (height, width) = "
                    f"({self._height}, {self._width})")
            if not np.isin(grid, (FREE, OCCUPIED, UNKNOWN)).all():
                raise ValueError("Cell values must be 0 (free), 1 (occupied) or -1 (unknown)")
        grid.setflags(write=False)
        self._grid = grid

        # 规划用的阻塞掩码：越界/未知按占据处理
        blocked = grid == OCCUPIED
        if unknown_is_occupied:
            blocked = blocked | (grid == UNKNOWN)
        blocked.setflags(write=False)
        self._blocked = blocked

        self._clearance = None  # 懒计算的距离场 (单位: cell)

    @classmethod
    def from_array(cls, data: np.ndarray, resolution: float = 0.2,
                   origin: Tuple[float, float] = (0.0, 0.0),
                   unknown_is_occupied: bool = True) -> "OccupancyMap":
        data = np.asarray(data)
        height, width = data.shape
        return cls(width, height, resolution, origin, data, unknown_is_occupied)

    @property
    def data(self) -> np.ndarray:
        return self._grid

    @property
    def blocked(self) -> np.ndarray:
        """布尔矩阵，True 表示规划时不可通行"""
        return self._blocked

    @property
    def resolution(self) -> float:
        return self._resolution

    @property
    def origin(self) -> Tuple[float, float]:
        return self._origin

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def world_to_cell(self, x: float, y: float) -> Tuple[int, int]:
        """
        物理坐标 -> 栅格索引
        向下取整：floor((x - origin) / res)
        """
        ix = int(math.floor((x - self._origin[0]) / self._resolution))
        iy = int(math.floor((y - self._origin[1]) / self._resolution))
        return ix, iy

    def cell_to_world(self, ix: int, iy: int) -> Tuple[float, float]:
        """
        栅格索引 -> 物理坐标
        返回格子中心：origin + idx * res + res/2
        """
        x = self._origin[0] + ix * self._resolution + self._resolution / 2.0
        y = self._origin[1] + iy * self._resolution + self._resolution / 2.0
        return x, y

    def in_bounds(self, ix: int, iy: int) -> bool:
        return (0 <= ix < self._width) and (0 <= iy < self._height)

    def is_occupied(self, ix: int, iy: int) -> bool:
        """查询栅格索引是否被占据"""
        if not self.in_bounds(ix, iy):
            return True  # closed world: 越界视为障碍
        return bool(self._blocked[iy, ix])

    def updated(self, cells: Iterable[Tuple[int, int]], value: int = OCCUPIED) -> "OccupancyMap":
        """返回修改了若干格子的新快照，原地图不变"""
        grid = self._grid.copy()
        for ix, iy in cells:
            if self.in_bounds(ix, iy):
                grid[iy, ix] = value
        return OccupancyMap(self._width, self._height, self._resolution, self._origin,
                            grid, self.unknown_is_occupied)

    def precompute_distance_map(self):
        """
        计算欧氏距离变换 (Euclidean Distance Transform, EDT)。
        地图外围补一圈障碍，所以越界也算作最近障碍。结果单位为 cell。
        """
        # distance_transform_edt 计算的是“当前像素离最近的0值像素的距离”
        # 所以需要：障碍物=0, 空闲=1
        padded = np.pad(self._blocked, 1, mode='constant', constant_values=True)
        dist = distance_transform_edt(~padded)
        dist.setflags(write=False)
        self._clearance = dist

    def clearance_cells(self, ix: int, iy: int) -> float:
        """格子中心到最近阻塞格子中心的距离 (cell)。越界返回 0。"""
        if not self.in_bounds(ix, iy):
            return 0.0
        if self._clearance is None:
            self.precompute_distance_map()
        return float(self._clearance[iy + 1, ix + 1])

    def obstacle_distance(self, x: float, y: float) -> float:
        """
        获取指定坐标离最近障碍物的距离 (米)。越界返回 0.0 (视为最危险)。
        """
        ix, iy = self.world_to_cell(x, y)
        return self.clearance_cells(ix, iy) * self._resolution

    def __repr__(self) -> str:
        return (f"OccupancyMap({self._width}x{self._height}, res={self._resolution}, "
                f"origin={self._origin})")
