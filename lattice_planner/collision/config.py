# lattice_planner/collision/config.py
from enum import Enum
from dataclasses import dataclass


class CollisionMethod(Enum):
    # 离散栅格检测：查预计算的扫掠格子 (默认，规划时使用)
    RASTER = 0

    # 多边形 SAT 检测 (最精确，计算量大，适合事后验证)
    POLYGON = 1


@dataclass
class CollisionConfig:
    method: CollisionMethod = CollisionMethod.RASTER
    # 起点格子的距离场大于扫掠半径时直接判定无碰撞
    use_clearance_broad_phase: bool = True
