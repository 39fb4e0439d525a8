# lattice_planner/vehicles/car.py
import math
from typing import List, Optional

import numpy as np

from lattice_planner.types import HeadingSet, State
from lattice_planner.primitives.primitive import MotionPrimitive, FORWARD, REVERSE
from lattice_planner.primitives.generator import PrimitiveBuilder
from .base import VehicleBase
from .config import CarConfig


class CarModel(VehicleBase):
    """
    阿克曼车 / 叉车。参考点为后轴中心，不能原地转向。
    """
    MODEL_ID = "car"

    def __init__(self, config: CarConfig = None, model_id: Optional[str] = None):
        super().__init__(config or CarConfig(), model_id)
        self.config: CarConfig = self.config

    def steer_for_radius(self, radius: float) -> float:
        """自行车模型: tan(steer) = wheelbase / R，radius 带符号"""
        if math.isinf(radius):
            return 0.0
        return math.atan(self.config.wheelbase / radius)

    def primitives_for(self, heading: int, headings: HeadingSet,
                       resolution: float) -> List[MotionPrimitive]:
        cfg = self.config
        builder = PrimitiveBuilder(self, headings, resolution, self.steer_for_radius)

        directions = [(FORWARD, 1.0)]
        if cfg.allow_reverse:
            directions.append((REVERSE, cfg.reverse_penalty))

        result = []
        for direction, factor in directions:
            result.append(builder.straight(heading, direction, factor))
            for k in cfg.turn_offsets:
                for offset in (k, -k):
                    prim = builder.turn(heading, offset, cfg.min_turn_radius, direction,
                                        cfg.turn_penalty, factor)
                    if prim is not None:
                        result.append(prim)
        return result

    def footprint_at(self, state: State) -> List[np.ndarray]:
        return [self.transform_points(self.config.collision_coords, state)]

    def get_visualization_polygons(self, state: State) -> List[np.ndarray]:
        return [self.transform_points(self.config.outline_coords, state)]

    def is_kinematically_valid(self, primitive: MotionPrimitive) -> bool:
        if primitive.is_rotation:
            return False
        if primitive.direction == REVERSE and not self.config.allow_reverse:
            return False
        return primitive.turn_radius_m >= self.config.min_turn_radius - 1e-6
