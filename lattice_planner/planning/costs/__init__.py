# lattice_planner/planning/costs/__init__.py

from .base import CostFunction
from .primitive_cost import PrimitiveCost
from .clearance_cost import ClearanceCost

__all__ = ['CostFunction', 'PrimitiveCost', 'ClearanceCost']
