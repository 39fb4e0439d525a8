# lattice_planner/planning/planners/base.py
import time
from abc import ABC, abstractmethod
from typing import Callable, Iterator, List, Optional, Tuple

from lattice_planner.types import Configuration
from lattice_planner.primitives.primitive import MotionPrimitive
from lattice_planner.primitives.table import PrimitiveSelector
from lattice_planner.collision.checker import CollisionChecker
from lattice_planner.planning.interfaces import IPlannerObserver
from lattice_planner.planning.request import GoalRegion, SearchResult
from lattice_planner.planning.heuristics import Heuristic, EuclideanHeuristic
from lattice_planner.planning.costs import CostFunction, PrimitiveCost


class PlannerBase(ABC):
    """
    所有 lattice 规划器的抽象基类

    规划器实例只服务一个请求：节点池在 plan() 内部创建，结束后丢弃。
    """

    def __init__(self,
                 selector: PrimitiveSelector,
                 collision_checker: CollisionChecker,
                 heuristic: Heuristic = None,
                 cost_functions: List[CostFunction] = None,
                 weights: List[float] = None,
                 max_expansions: int = 200000,
                 clock: Callable[[], float] = time.monotonic):
        self.selector = selector
        self.collision_checker = collision_checker
        self.headings = selector.table.headings
        self.h_fn = heuristic or EuclideanHeuristic()
        self.cost_fns = cost_functions if cost_functions is not None else [PrimitiveCost()]
        self.weights = weights if weights is not None else [1.0] * len(self.cost_fns)
        self.max_expansions = max_expansions
        self.clock = clock

        assert len(self.cost_fns) == len(self.weights), "Cost functions and weights mismatch"

    @abstractmethod
    def plan(self,
             start: Configuration,
             goal: GoalRegion,
             grid_map,
             time_budget_s: Optional[float] = None,
             observer: Optional[IPlannerObserver] = None) -> SearchResult:
        """
        执行搜索
        :param start: 起点 (已确认无碰撞)
        :param goal: 目标区域
        :param grid_map: 地图快照，搜索期间只读
        :param time_budget_s: None 表示不限时
        :param observer: 观察者钩子 (用于可视化搜索过程)
        """
        pass

    # ------------------------------------------------------------------
    def successors(self, config: Configuration,
                   grid_map) -> Iterator[Tuple[MotionPrimitive, Configuration, float]]:
        """展开一个节点：按表顺序返回 (primitive, 后继位姿, 边代价)"""
        for prim in self.selector.select(config, grid_map):
            if not self.collision_checker.is_primitive_free(config.cell, prim, grid_map):
                continue
            key = (config.ix + prim.dx, config.iy + prim.dy, prim.end_heading)
            nxt = Configuration.from_key(key, grid_map, self.headings)
            yield prim, nxt, self.edge_cost(config, prim, nxt, grid_map)

    def edge_cost(self, current: Configuration, primitive: MotionPrimitive,
                  nxt: Configuration, grid_map) -> float:
        cost = 0.0
        for fn, w in zip(self.cost_fns, self.weights):
            cost += w * fn.calculate(current, primitive, nxt, grid_map)
        return cost

    def deadline(self, time_budget_s: Optional[float]) -> Optional[float]:
        if time_budget_s is None:
            return None
        return self.clock() + time_budget_s

    def expired(self, deadline: Optional[float]) -> bool:
        return deadline is not None and self.clock() >= deadline
