# lattice_planner/map/__init__.py

from .base import MapBase, FREE, OCCUPIED, UNKNOWN
from .occupancy_map import OccupancyMap
from .io import load_map, save_map

__all__ = ["MapBase", "OccupancyMap", "load_map", "save_map", "FREE", "OCCUPIED", "UNKNOWN"]
