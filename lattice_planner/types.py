# lattice_planner/types.py
import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .errors import ConfigError


@dataclass
class State:
    """
    统一的车辆状态定义
    """
    x: float             # [m]
    y: float             # [m]
    theta_rad: float     # [rad]
    steer_rad: float = 0.0  # [rad] 前轮转角 (car) / 铰接角 (load carrier)


# 第一象限的格点方向向量。角度由向量本身决定 (非均匀离散)，
# 这样直行 primitive 一定落在格点上。
_QUADRANT_VECTORS: Dict[int, List[Tuple[int, int]]] = {
    4: [(1, 0)],
    8: [(1, 0), (1, 1)],
    16: [(1, 0), (2, 1), (1, 1), (1, 2)],
    32: [(1, 0), (5, 1), (5, 2), (3, 2), (1, 1), (2, 3), (2, 5), (1, 5)],
}


class HeadingSet:
    """
    离散航向集合。

    heading k 的角度是 lattice 方向向量 k 的 atan2，而不是 2*pi*k/N。
    """

    def __init__(self, num_headings: int = 16):
        if num_headings not in _QUADRANT_VECTORS:
            raise ConfigError(
                f"Unsupported heading count {num_headings}; "
                f"expected one of {sorted(_QUADRANT_VECTORS)}")
        self.num_headings = num_headings

        vectors = []
        quadrant = _QUADRANT_VECTORS[num_headings]
        for q in range(4):
            for vx, vy in quadrant:
                # 每次旋转 90°: (x, y) -> (-y, x)
                for _ in range(q):
                    vx, vy = -vy, vx
                vectors.append((vx, vy))
        self.vectors: Tuple[Tuple[int, int], ...] = tuple(vectors)
        self.angles: Tuple[float, ...] = tuple(math.atan2(vy, vx) for vx, vy in vectors)

    def __len__(self) -> int:
        return self.num_headings

    def __eq__(self, other) -> bool:
        return isinstance(other, HeadingSet) and other.num_headings == self.num_headings

    def __hash__(self) -> int:
        return hash(self.num_headings)

    def __repr__(self) -> str:
        return f"HeadingSet({self.num_headings})"

    def angle(self, index: int) -> float:
        return self.angles[index % self.num_headings]

    def vector(self, index: int) -> Tuple[int, int]:
        return self.vectors[index % self.num_headings]

    def wrap(self, index: int) -> int:
        return index % self.num_headings

    def opposite(self, index: int) -> int:
        return (index + self.num_headings // 2) % self.num_headings

    def index_of(self, theta_rad: float) -> int:
        """最近的离散航向；距离相等时取较小的索引"""
        best_idx, best_diff = 0, float('inf')
        for i, a in enumerate(self.angles):
            diff = abs(normalize_angle(theta_rad - a))
            if diff < best_diff - 1e-12:
                best_idx, best_diff = i, diff
        return best_idx

    def steps_between(self, a: int, b: int) -> int:
        """两个航向索引之间的最小步数 (环形)"""
        d = abs(a - b) % self.num_headings
        return min(d, self.num_headings - d)


def normalize_angle(angle: float) -> float:
    """归一化到 [-pi, pi)"""
    return (angle + math.pi) % (2 * math.pi) - math.pi


class Configuration:
    """
    搜索用的离散位姿。

    连续位姿永远是格子中心 + 离散航向的精确角度，所以 (x, y, theta) 和
    (ix, iy, itheta) 始终一致。相等性只看离散索引。
    """
    __slots__ = ("x", "y", "theta_rad", "ix", "iy", "itheta")

    def __init__(self, x: float, y: float, theta_rad: float, ix: int, iy: int, itheta: int):
        self.x = x
        self.y = y
        self.theta_rad = theta_rad
        self.ix = ix
        self.iy = iy
        self.itheta = itheta

    @classmethod
    def from_key(cls, key: Tuple[int, int, int], grid_map, headings: HeadingSet) -> "Configuration":
        ix, iy, itheta = key
        x, y = grid_map.cell_to_world(ix, iy)
        return cls(x, y, headings.angle(itheta), ix, iy, itheta)

    @classmethod
    def from_state(cls, state: State, grid_map, headings: HeadingSet) -> "Configuration":
        """把连续状态吸附到所在格子的中心和最近的航向"""
        ix, iy = grid_map.world_to_cell(state.x, state.y)
        return cls.from_key((ix, iy, headings.index_of(state.theta_rad)), grid_map, headings)

    @property
    def key(self) -> Tuple[int, int, int]:
        return (self.ix, self.iy, self.itheta)

    @property
    def cell(self) -> Tuple[int, int]:
        return (self.ix, self.iy)

    def to_state(self) -> State:
        return State(self.x, self.y, self.theta_rad)

    def __eq__(self, other) -> bool:
        return isinstance(other, Configuration) and self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return (f"Configuration(x={self.x:.3f}, y={self.y:.3f}, theta={self.theta_rad:.3f}, "
                f"key={self.key})")
