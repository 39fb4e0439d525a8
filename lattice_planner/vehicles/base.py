# lattice_planner/vehicles/base.py
from abc import ABC, abstractmethod
from typing import List, Optional
import math

import numpy as np

from lattice_planner.types import HeadingSet, State
from lattice_planner.primitives.primitive import MotionPrimitive
from .config import VehicleConfig


class VehicleBase(ABC):
    """
    车型：primitive 生成 + 碰撞轮廓 + 运动学可行性。

    车型对象只读，可以被多个 PathFinder / 线程共享。
    model_id 是 primitive 表文件头里的名字，表和车型靠它对应。
    """
    MODEL_ID = "vehicle"

    def __init__(self, config: VehicleConfig, model_id: Optional[str] = None):
        self.config = config
        self.model_id = model_id or self.MODEL_ID

    @abstractmethod
    def primitives_for(self, heading: int, headings: HeadingSet,
                       resolution: float) -> List[MotionPrimitive]:
        """
        从离散航向 heading 出发的全部 primitive，id 由表统一分配。
        输出顺序必须确定，表的 id 依赖它。
        """

    @abstractmethod
    def footprint_at(self, state: State) -> List[np.ndarray]:
        """
        state 处的碰撞轮廓：世界坐标下的凸多边形列表，每个 (N, 2)，已含 safe_margin。
        铰接车的 state.steer_rad 是铰接角。
        """

    @abstractmethod
    def is_kinematically_valid(self, primitive: MotionPrimitive) -> bool:
        pass

    def get_visualization_polygons(self, state: State) -> List[np.ndarray]:
        return self.footprint_at(state)

    @staticmethod
    def transform_points(local_points: np.ndarray, state: State) -> np.ndarray:
        """车体坐标 (N, 2) -> 世界坐标：先绕原点转 theta，再平移到 (x, y)"""
        c, s = math.cos(state.theta_rad), math.sin(state.theta_rad)
        rot = np.array([[c, -s], [s, c]])
        return np.asarray(local_points, dtype=float) @ rot.T + (state.x, state.y)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model_id={self.model_id!r})"
