# lattice_planner/planning/costs/base.py
from abc import ABC, abstractmethod

from lattice_planner.types import Configuration
from lattice_planner.primitives.primitive import MotionPrimitive


class CostFunction(ABC):
    """
    边代价：从 current 执行 primitive 到达 next_config。

    返回值必须 >= 0。规划器把各项按权重相加，只要 PrimitiveCost 的权重 >= 1，
    欧氏启发式就仍然可采纳。
    """
    @abstractmethod
    def calculate(self, current: Configuration, primitive: MotionPrimitive,
                  next_config: Configuration, grid_map) -> float:
        pass
