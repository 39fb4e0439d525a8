# lattice_planner/vehicles/unicycle.py
from typing import List, Optional

import numpy as np

from lattice_planner.types import HeadingSet, State
from lattice_planner.primitives.primitive import MotionPrimitive, FORWARD, REVERSE
from lattice_planner.primitives.generator import PrimitiveBuilder
from .base import VehicleBase
from .config import UnicycleConfig


class UnicycleModel(VehicleBase):
    """差速小车：直行 + 原地旋转 (可选弧线)"""
    MODEL_ID = "unicycle"

    def __init__(self, config: UnicycleConfig = None, model_id: Optional[str] = None):
        super().__init__(config or UnicycleConfig(), model_id)
        self.config: UnicycleConfig = self.config

    def primitives_for(self, heading: int, headings: HeadingSet,
                       resolution: float) -> List[MotionPrimitive]:
        cfg = self.config
        builder = PrimitiveBuilder(self, headings, resolution)

        result = [builder.straight(heading, FORWARD)]
        if cfg.allow_reverse:
            result.append(builder.straight(heading, REVERSE, cfg.reverse_penalty))
        for offset in (1, -1):
            result.append(builder.rotate(heading, offset, cfg.rotation_cost))

        if cfg.turn_radius_m > 0:
            for offset in (1, -1):
                prim = builder.turn(heading, offset, cfg.turn_radius_m, FORWARD, cfg.turn_penalty)
                if prim is not None:
                    result.append(prim)
        return result

    def footprint_at(self, state: State) -> List[np.ndarray]:
        return [self.transform_points(self.config.collision_coords, state)]

    def get_visualization_polygons(self, state: State) -> List[np.ndarray]:
        return [self.transform_points(self.config.outline_coords, state)]

    def is_kinematically_valid(self, primitive: MotionPrimitive) -> bool:
        if primitive.direction == REVERSE and not self.config.allow_reverse:
            return False
        return True
