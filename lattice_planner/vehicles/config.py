# [配置] 该模块独有的配置数据类
from dataclasses import dataclass, field
from typing import Tuple
import math

import numpy as np

from lattice_planner.errors import ConfigError


def _rectangle(x_min: float, x_max: float, y_min: float, y_max: float) -> np.ndarray:
    # 顺时针: 右前 -> 右后 -> 左后 -> 左前
    return np.array([
        [x_max, y_min],
        [x_min, y_min],
        [x_min, y_max],
        [x_max, y_max],
    ])


@dataclass
class VehicleConfig:
    """所有车辆通用的配置"""
    safe_margin: float = 0.1       # 碰撞轮廓向外膨胀的安全余量 [m]
    allow_reverse: bool = True
    reverse_penalty: float = 2.0   # 倒车代价倍数 (>= 1)
    turn_penalty: float = 1.2      # 弧线段长度的代价倍数 (>= 1)

    def _validate_common(self):
        if self.safe_margin < 0:
            raise ConfigError("safe_margin must be >= 0")
        # 代价倍数 >= 1 保证 primitive 代价不小于位移，欧氏启发式才可采纳
        if self.reverse_penalty < 1.0 or self.turn_penalty < 1.0:
            raise ConfigError("reverse_penalty and turn_penalty must be >= 1.0")


@dataclass
class CarConfig(VehicleConfig):
    """
    车型 (叉车/阿克曼) 物理参数配置
    参考点为后轴中心
    """
    # --- 1. 基础几何参数 ---
    wheelbase: float = 2.5       # [m] 轴距
    width: float = 2.0           # [m] 车宽
    front_hang: float = 0.9      # [m] 前悬 (前轴中心到车头)
    rear_hang: float = 0.9       # [m] 后悬 (后轴中心到车尾)

    # --- 2. 运动学限制 ---
    max_steer_deg: float = 35.0  # [deg] 最大转向角
    turn_offsets: Tuple[int, ...] = (1,)  # 单个 primitive 允许改变的航向步数

    # --- 3. 派生属性 (自动计算，外部只读) ---
    max_steer: float = field(init=False)
    min_turn_radius: float = field(init=False)
    outline_coords: np.ndarray = field(init=False)   # 车身矩形 (4x2)，相对后轴中心
    collision_coords: np.ndarray = field(init=False) # 加上 safe_margin 的碰撞矩形

    def __post_init__(self):
        self._validate_common()
        if self.wheelbase <= 0 or self.width <= 0:
            raise ConfigError("wheelbase and width must be positive")
        if not 0 < self.max_steer_deg < 90:
            raise ConfigError(f"max_steer_deg must be in (0, 90), got {self.max_steer_deg}")
        if not self.turn_offsets or any(k <= 0 for k in self.turn_offsets):
            raise ConfigError("turn_offsets must be positive heading steps")

        # A. 角度转弧度
        self.max_steer = math.radians(self.max_steer_deg)
        self.min_turn_radius = self.wheelbase / math.tan(self.max_steer)

        # B. 车身轮廓 (x轴向前，y轴向左)
        front_x = self.wheelbase + self.front_hang
        rear_x = -self.rear_hang
        half_w = self.width / 2.0
        self.outline_coords = _rectangle(rear_x, front_x, -half_w, half_w)

        m = self.safe_margin
        self.collision_coords = _rectangle(rear_x - m, front_x + m, -half_w - m, half_w + m)


@dataclass
class ArticulatedConfig(VehicleConfig):
    """
    铰接式装载车 (LHD) 配置
    参考点为前轴中心，铰接点在其后方 front_length 处
    """
    front_length: float = 1.5      # [m] 前轴中心 -> 铰接点
    rear_length: float = 1.5       # [m] 铰接点 -> 后轴中心
    front_overhang: float = 1.0    # [m] 前轴中心 -> 车头
    rear_overhang: float = 1.0     # [m] 后轴中心 -> 车尾
    width: float = 1.8
    max_articulation_deg: float = 40.0
    turn_offsets: Tuple[int, ...] = (1,)
    reverse_penalty: float = 1.5

    max_articulation: float = field(init=False)
    min_turn_radius: float = field(init=False)     # 前轴中心的最小转弯半径
    front_coords: np.ndarray = field(init=False)   # 前车体 (前车坐标系, 原点前轴)
    rear_coords: np.ndarray = field(init=False)    # 后车体 (后车坐标系, 原点铰接点)

    def __post_init__(self):
        self._validate_common()
        if min(self.front_length, self.rear_length, self.width) <= 0:
            raise ConfigError("front_length, rear_length and width must be positive")
        if not 0 < self.max_articulation_deg < 90:
            raise ConfigError("max_articulation_deg must be in (0, 90)")
        if not self.turn_offsets or any(k <= 0 for k in self.turn_offsets):
            raise ConfigError("turn_offsets must be positive heading steps")

        self.max_articulation = math.radians(self.max_articulation_deg)
        # 稳态转弯: theta_dot = v * sin(g) / (L1 * cos(g) + L2)
        g = self.max_articulation
        self.min_turn_radius = (self.front_length * math.cos(g) + self.rear_length) / math.sin(g)

        m = self.safe_margin
        half_w = self.width / 2.0 + m
        self.front_coords = _rectangle(-self.front_length, self.front_overhang + m, -half_w, half_w)
        self.rear_coords = _rectangle(-(self.rear_length + self.rear_overhang) - m, 0.0, -half_w, half_w)

    def articulation_for_radius(self, radius: float) -> float:
        """前轴转弯半径 (带符号, 左正) 对应的稳态铰接角"""
        if math.isinf(radius):
            return 0.0
        r = abs(radius)
        L1, L2 = self.front_length, self.rear_length
        gamma = math.atan2(L1, r) + math.asin(min(1.0, L2 / math.hypot(r, L1)))
        return math.copysign(gamma, radius)


@dataclass
class UnicycleConfig(VehicleConfig):
    """
    差速/独轮车模型配置 (可原地转向)
    参考点为车体中心
    """
    width: float = 0.8
    length: float = 1.0
    allow_reverse: bool = False
    rotation_cost: float = 0.5     # 原地旋转代价 [per rad]
    turn_radius_m: float = 0.0     # > 0 时额外生成该半径以上的弧线 primitive
    turn_penalty: float = 1.0

    outline_coords: np.ndarray = field(init=False)
    collision_coords: np.ndarray = field(init=False)

    def __post_init__(self):
        self._validate_common()
        if self.width <= 0 or self.length <= 0:
            raise ConfigError("width and length must be positive")
        if self.rotation_cost <= 0:
            raise ConfigError("rotation_cost must be positive")
        if self.turn_radius_m < 0:
            raise ConfigError("turn_radius_m must be >= 0")

        dx = self.length / 2.0
        dy = self.width / 2.0
        self.outline_coords = _rectangle(-dx, dx, -dy, dy)
        m = self.safe_margin
        self.collision_coords = _rectangle(-dx - m, dx + m, -dy - m, dy + m)
