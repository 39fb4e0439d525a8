# lattice_planner/planning/__init__.py

from .interfaces import IPlannerObserver
from .request import (PlannerType, GoalTolerance, GoalRegion, PlanningRequest, PathStep,
                      PlanningResult, SearchStatus, SearchResult, ImprovingSolution)
from .node_store import NodeState, SearchNode, SearchNodeStore
from .planners import PlannerBase, AStarPlanner, ARAStarPlanner, AraPhase
from .path_finder import PathFinder, PlanningContext

__all__ = [
    "IPlannerObserver",
    "PlannerType", "GoalTolerance", "GoalRegion", "PlanningRequest", "PathStep",
    "PlanningResult", "SearchStatus", "SearchResult", "ImprovingSolution",
    "NodeState", "SearchNode", "SearchNodeStore",
    "PlannerBase", "AStarPlanner", "ARAStarPlanner", "AraPhase",
    "PathFinder", "PlanningContext",
]
