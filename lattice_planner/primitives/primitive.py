# lattice_planner/primitives/primitive.py
import dataclasses
import math
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

FORWARD = 1
REVERSE = -1
ROTATE = 0


@dataclass(frozen=True, eq=False)
class MotionPrimitive:
    """
    预计算的相对机动。

    poses: (K, 4) 相对起点格子中心的采样 [x, y, theta, steer]，theta 为绝对航向
    swept_cells: (M, 2) 相对起点格子的扫掠格子偏移，按首次接触顺序排列
    """
    primitive_id: int
    start_heading: int
    end_heading: int
    dx: int
    dy: int
    cost: float
    length_m: float
    direction: int
    turn_radius_m: float     # 直行为 inf，原地旋转为 0
    poses: np.ndarray
    swept_cells: np.ndarray

    # --- 派生属性 ---
    swept_radius: float = field(init=False)        # 扫掠格子到起点格子的最大距离 [cell]
    swept_min: Tuple[int, int] = field(init=False)
    swept_max: Tuple[int, int] = field(init=False)
    max_steer: float = field(init=False)           # 采样中的最大 |steer|

    def __post_init__(self):
        poses = np.array(self.poses, dtype=float).reshape(-1, 4)
        cells = np.array(self.swept_cells, dtype=np.int32).reshape(-1, 2)
        poses.setflags(write=False)
        cells.setflags(write=False)
        object.__setattr__(self, "poses", poses)
        object.__setattr__(self, "swept_cells", cells)

        if len(cells) > 0:
            radius = float(np.max(np.hypot(cells[:, 0], cells[:, 1])))
            lo = cells.min(axis=0)
            hi = cells.max(axis=0)
            swept_min = (int(lo[0]), int(lo[1]))
            swept_max = (int(hi[0]), int(hi[1]))
        else:
            radius, swept_min, swept_max = 0.0, (0, 0), (0, 0)
        object.__setattr__(self, "swept_radius", radius)
        object.__setattr__(self, "swept_min", swept_min)
        object.__setattr__(self, "swept_max", swept_max)
        object.__setattr__(self, "max_steer",
                           float(np.max(np.abs(poses[:, 3]))) if len(poses) else 0.0)

    @property
    def delta_cells(self) -> Tuple[int, int]:
        return (self.dx, self.dy)

    @property
    def is_straight(self) -> bool:
        return self.direction != ROTATE and math.isinf(self.turn_radius_m)

    @property
    def is_rotation(self) -> bool:
        return self.direction == ROTATE

    def with_id(self, primitive_id: int) -> "MotionPrimitive":
        return dataclasses.replace(self, primitive_id=primitive_id)

    def __repr__(self) -> str:
        return (f"MotionPrimitive(id={self.primitive_id}, {self.start_heading}->{self.end_heading}, "
                f"delta=({self.dx}, {self.dy}), cost={self.cost:.3f}, dir={self.direction})")
