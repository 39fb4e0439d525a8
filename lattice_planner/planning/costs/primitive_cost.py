# lattice_planner/planning/costs/primitive_cost.py
from .base import CostFunction


class PrimitiveCost(CostFunction):
    """primitive 表里预计算的代价 (路程 + 转弯/倒车惩罚)"""

    def calculate(self, current, primitive, next_config, grid_map) -> float:
        return primitive.cost
