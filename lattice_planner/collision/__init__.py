# lattice_planner/collision/__init__.py

from .geometry import check_sat_polygon_collision, polygon_cells
from .config import CollisionConfig, CollisionMethod
from .checker import CollisionChecker
from .footprint import FootprintModel, rasterize_footprint

__all__ = [
    "CollisionConfig",
    "CollisionMethod",
    "CollisionChecker",
    "FootprintModel",
    "rasterize_footprint",
    "check_sat_polygon_collision",
    "polygon_cells",
]
