# lattice_planner/planning/planners/__init__.py

from .base import PlannerBase
from .a_star import AStarPlanner
from .ara_star import ARAStarPlanner, AraPhase


__all__ = [
    "PlannerBase",
    "AStarPlanner",
    "ARAStarPlanner",
    "AraPhase",
]
