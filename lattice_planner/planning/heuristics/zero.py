# lattice_planner/planning/heuristics/zero.py
from lattice_planner.types import Configuration
from .base import Heuristic


class ZeroHeuristic(Heuristic):
    """h = 0，A* 退化为 Dijkstra"""
    def estimate(self, current: Configuration, goal) -> float:
        return 0.0
