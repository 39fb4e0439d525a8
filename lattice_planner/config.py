# [关键] 全局配置定义

# lattice_planner/config.py
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError


@dataclass
class PlannerConfig:
    resolution: float = 0.2              # [m/cell] primitive 表与地图的分辨率
    num_headings: int = 16               # 离散航向数量
    max_expansions: int = 200000         # 单次请求的最大扩展次数
    default_time_budget_s: Optional[float] = 5.0  # None 表示不限时

    # A*
    weight: float = 1.0                  # f = g + w * h

    # ARA*
    epsilon_initial: float = 3.0
    epsilon_decrement: float = 0.5       # 每轮固定递减，最后一轮一定是 1.0

    table_workers: int = 1               # primitive 表构建的线程数
    debug_mode: bool = False

    def __post_init__(self):
        if self.resolution <= 0:
            raise ConfigError(f"resolution must be positive, got {self.resolution}")
        if self.max_expansions <= 0:
            raise ConfigError("max_expansions must be positive")
        if self.weight < 1.0:
            raise ConfigError(f"weight must be >= 1.0, got {self.weight}")
        if self.epsilon_initial < 1.0:
            raise ConfigError(f"epsilon_initial must be >= 1.0, got {self.epsilon_initial}")
        if self.epsilon_decrement <= 0:
            raise ConfigError("epsilon_decrement must be positive")
        if self.default_time_budget_s is not None and self.default_time_budget_s < 0:
            raise ConfigError("default_time_budget_s must be >= 0")
        if self.table_workers < 1:
            raise ConfigError("table_workers must be >= 1")
