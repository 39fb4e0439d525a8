# lattice_planner/__init__.py
# planning 先于 visualization 导入 (planners 依赖 observers)
from .types import State, HeadingSet, Configuration
from .config import PlannerConfig
from .errors import (FailureCode, PlannerError, ConfigError, PrimitiveTableError,
                     InvalidInputError, MapFormatError)
from .planning import (PathFinder, PlanningRequest, PlanningResult, PlannerType,
                       GoalTolerance)
from .map import OccupancyMap, load_map, save_map
from .vehicles import CarModel, ArticulatedModel, UnicycleModel

__version__ = "0.1.0"

__all__ = [
    "State", "HeadingSet", "Configuration", "PlannerConfig",
    "FailureCode", "PlannerError", "ConfigError", "PrimitiveTableError",
    "InvalidInputError", "MapFormatError",
    "PathFinder", "PlanningRequest", "PlanningResult", "PlannerType", "GoalTolerance",
    "OccupancyMap", "load_map", "save_map",
    "CarModel", "ArticulatedModel", "UnicycleModel",
]
