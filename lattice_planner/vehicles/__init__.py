# [入口] 负责暴露类，让外部调用更简洁

# lattice_planner/vehicles/__init__.py
from .base import VehicleBase
from .config import VehicleConfig, CarConfig, ArticulatedConfig, UnicycleConfig
from .car import CarModel
from .articulated import ArticulatedModel
from .unicycle import UnicycleModel

__all__ = [
    "VehicleBase", "VehicleConfig",
    "CarConfig", "ArticulatedConfig", "UnicycleConfig",
    "CarModel", "ArticulatedModel", "UnicycleModel",
]
