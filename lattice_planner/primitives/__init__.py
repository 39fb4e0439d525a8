# lattice_planner/primitives/__init__.py
from .primitive import MotionPrimitive, FORWARD, REVERSE, ROTATE
from .generator import PrimitiveBuilder, solve_turn
from .table import PrimitiveTable, PrimitiveSelector, cache_filename

__all__ = [
    "MotionPrimitive", "FORWARD", "REVERSE", "ROTATE",
    "PrimitiveBuilder", "solve_turn",
    "PrimitiveTable", "PrimitiveSelector", "cache_filename",
]
