# lattice_planner/vehicles/articulated.py
import math
from typing import List, Optional

import numpy as np

from lattice_planner.types import HeadingSet, State, normalize_angle
from lattice_planner.primitives.primitive import MotionPrimitive, FORWARD, REVERSE
from lattice_planner.primitives.generator import PrimitiveBuilder
from .base import VehicleBase
from .config import ArticulatedConfig


class ArticulatedModel(VehicleBase):
    """
    铰接式装载车 (load-haul-dump)。

    位姿是前车体 (前轴中心) 的位姿，state.steer_rad 为铰接角 gamma：
    后车体航向 = theta - gamma。primitive 沿弧线保持稳态铰接角。
    """
    MODEL_ID = "lhd"

    def __init__(self, config: ArticulatedConfig = None, model_id: Optional[str] = None):
        super().__init__(config or ArticulatedConfig(), model_id)
        self.config: ArticulatedConfig = self.config

    def primitives_for(self, heading: int, headings: HeadingSet,
                       resolution: float) -> List[MotionPrimitive]:
        cfg = self.config
        builder = PrimitiveBuilder(self, headings, resolution, cfg.articulation_for_radius)

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

    def joint_state(self, state: State) -> State:
        """铰接点位置，航向为后车体航向"""
        L1 = self.config.front_length
        jx = state.x - L1 * math.cos(state.theta_rad)
        jy = state.y - L1 * math.sin(state.theta_rad)
        return State(jx, jy, normalize_angle(state.theta_rad - state.steer_rad))

    def footprint_at(self, state: State) -> List[np.ndarray]:
        front = self.transform_points(self.config.front_coords, state)
        rear = self.transform_points(self.config.rear_coords, self.joint_state(state))
        return [front, rear]

    def is_kinematically_valid(self, primitive: MotionPrimitive) -> bool:
        if primitive.is_rotation:
            return False
        if primitive.direction == REVERSE and not self.config.allow_reverse:
            return False
        return primitive.max_steer <= self.config.max_articulation + 1e-6
