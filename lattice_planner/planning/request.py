# lattice_planner/planning/request.py
"""
Request / response types of a planning call.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from lattice_planner.errors import FailureCode, InvalidInputError
from lattice_planner.types import Configuration, HeadingSet, State
from lattice_planner.primitives.primitive import MotionPrimitive


class PlannerType(Enum):
    A_STAR = "a_star"
    ARA_STAR = "ara_star"


@dataclass(frozen=True)
class GoalTolerance:
    xy_m: float = 0.0          # 到目标格子中心的距离容差 [m]
    heading_steps: int = 0     # 航向容差 [离散步]

    def __post_init__(self):
        if self.xy_m < 0 or self.heading_steps < 0:
            raise InvalidInputError("goal tolerance must be non-negative")


class GoalRegion:
    """目标格子 + 容差。xy_m = 0 且 heading_steps = 0 时只接受目标本身。"""

    def __init__(self, goal: Configuration, headings: HeadingSet,
                 tolerance: GoalTolerance = None):
        self.goal = goal
        self.headings = headings
        self.tolerance = tolerance or GoalTolerance()

    def distance(self, config: Configuration) -> float:
        return math.hypot(config.x - self.goal.x, config.y - self.goal.y)

    def contains(self, config: Configuration) -> bool:
        if config.key == self.goal.key:
            return True
        if self.distance(config) > self.tolerance.xy_m + 1e-9:
            return False
        return self.headings.steps_between(config.itheta, self.goal.itheta) <= self.tolerance.heading_steps


@dataclass
class PlanningRequest:
    start: State
    goal: State
    model_id: str
    grid_map: object
    time_budget_s: Optional[float] = None      # None: 使用 PlannerConfig 的默认值
    planner: PlannerType = PlannerType.ARA_STAR
    tolerance: GoalTolerance = field(default_factory=GoalTolerance)


@dataclass
class PathStep:
    configuration: Configuration
    primitive: Optional[MotionPrimitive] = None   # 到达该位姿所用的 primitive，起点为 None

    @property
    def primitive_id(self) -> Optional[int]:
        return None if self.primitive is None else self.primitive.primitive_id


@dataclass
class PlanningResult:
    success: bool
    path: List[PathStep] = field(default_factory=list)
    cost: float = math.inf
    failure_code: Optional[FailureCode] = None
    message: str = ""
    epsilon: float = 1.0                 # 返回路径的次优界
    is_partial: bool = False             # ARA* 被打断时返回的中间解
    solution_costs: List[float] = field(default_factory=list)
    expansions: int = 0
    planning_time_s: float = 0.0

    @classmethod
    def failure(cls, code: FailureCode, message: str, **kwargs) -> "PlanningResult":
        return cls(success=False, failure_code=code, message=message, **kwargs)

    @property
    def configurations(self) -> List[Configuration]:
        return [step.configuration for step in self.path]

    @property
    def primitive_ids(self) -> List[int]:
        return [step.primitive_id for step in self.path[1:]]

    def dense_states(self) -> List[State]:
        """沿 primitive 采样展开的连续轨迹，用于画图和跟踪"""
        if not self.path:
            return []
        states = [self.path[0].configuration.to_state()]
        for prev, step in zip(self.path, self.path[1:]):
            origin = prev.configuration
            for x, y, theta, steer in step.primitive.poses[1:]:
                states.append(State(origin.x + x, origin.y + y, theta, steer))
        return states

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "cost": None if math.isinf(self.cost) else self.cost,
            "failure_code": self.failure_code.value if self.failure_code else None,
            "message": self.message,
            "epsilon": self.epsilon,
            "is_partial": self.is_partial,
            "solution_costs": list(self.solution_costs),
            "expansions": self.expansions,
            "planning_time_s": self.planning_time_s,
            "path": [
                {"x": s.configuration.x, "y": s.configuration.y,
                 "theta": s.configuration.theta_rad, "key": list(s.configuration.key),
                 "primitive_id": s.primitive_id}
                for s in self.path
            ],
        }


# --- 规划器内部结果 ---

class SearchStatus(Enum):
    FOUND = "found"
    NO_PATH = "no_path"
    TIMEOUT = "timeout"


@dataclass
class ImprovingSolution:
    """ARA* 每完成一轮报告一次"""
    cost: float
    epsilon: float
    expansions: int
    elapsed_s: float
    path: List[PathStep]


@dataclass
class SearchResult:
    status: SearchStatus
    path: List[PathStep] = field(default_factory=list)
    cost: float = math.inf
    expansions: int = 0
    epsilon: float = 1.0
    is_partial: bool = False
    solutions: List[ImprovingSolution] = field(default_factory=list)
    message: str = ""

    @property
    def solution_costs(self) -> List[float]:
        return [s.cost for s in self.solutions]
