# lattice_planner/planning/heuristics/euclidean.py
from lattice_planner.types import Configuration
from .base import Heuristic


class EuclideanHeuristic(Heuristic):
    """
    欧氏距离启发式 (Holonomic Heuristic)

    每个 primitive 的代价都不小于它的位移 (各项惩罚倍数 >= 1)，
    所以直线距离既可采纳又一致。到达容差圆即算到达，所以减去 xy 容差。
    """
    def estimate(self, current: Configuration, goal) -> float:
        return max(0.0, goal.distance(current) - goal.tolerance.xy_m)
