# lattice_planner/planning/costs/clearance_cost.py
from lattice_planner.types import Configuration
from lattice_planner.primitives.primitive import MotionPrimitive
from .base import CostFunction


class ClearanceCost(CostFunction):
    """
    离障碍物太近时的附加代价，按 primitive 终点格子的 clearance 计算：

        cost = weight_factor * (risk_dist - d),  d < risk_dist
        cost = 0,                                 d >= risk_dist

    d 来自地图快照的 EDT (米)，每个快照只算一次。
    """
    def __init__(self, risk_dist: float = 2.0, weight_factor: float = 10.0):
        if risk_dist < 0 or weight_factor < 0:
            raise ValueError("risk_dist and weight_factor must be non-negative")
        self.risk_dist = risk_dist
        self.weight_factor = weight_factor

    def calculate(self, current: Configuration, primitive: MotionPrimitive,
                  next_config: Configuration, grid_map) -> float:
        dist = grid_map.obstacle_distance(next_config.x, next_config.y)
        if dist >= self.risk_dist:
            return 0.0
        return self.weight_factor * (self.risk_dist - dist)
