# lattice_planner/planning/heuristics/base.py
from abc import ABC, abstractmethod

from lattice_planner.types import Configuration


class Heuristic(ABC):
    @abstractmethod
    def estimate(self, current: Configuration, goal) -> float:
        """统一接口：当前离散位姿到目标区域 (GoalRegion) 的代价下界"""
        pass
