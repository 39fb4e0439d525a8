# lattice_planner/planning/path_finder.py
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from lattice_planner.config import PlannerConfig
from lattice_planner.errors import ConfigError, FailureCode, InvalidInputError
from lattice_planner.types import Configuration, HeadingSet, State
from lattice_planner.primitives.table import PrimitiveSelector, PrimitiveTable
from lattice_planner.collision.checker import CollisionChecker
from lattice_planner.collision.config import CollisionConfig
from lattice_planner.planning.interfaces import IPlannerObserver
from lattice_planner.planning.request import (GoalRegion, ImprovingSolution, PlannerType,
                                              PlanningRequest, PlanningResult, SearchStatus)
from lattice_planner.planning.heuristics import Heuristic, EuclideanHeuristic
from lattice_planner.planning.costs import CostFunction
from lattice_planner.planning.planners import AStarPlanner, ARAStarPlanner
from lattice_planner.visualization.observers import DebugObserver, EfficientObserver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanningContext:
    """
    一个车型在固定分辨率/航向数下的只读上下文。
    注册时构建一次，之后被所有请求共享。
    """
    vehicle: object
    headings: HeadingSet
    resolution: float
    table: PrimitiveTable
    selector: PrimitiveSelector
    checker: CollisionChecker

    @property
    def model_id(self) -> str:
        return self.vehicle.model_id


class PathFinder:
    """
    请求编排：查车型上下文 -> 校验起终点 -> 创建规划器 -> 运行 -> 转换结果。

    register_model 阶段的问题 (表缺失、损坏、分辨率不符) 抛 ConfigError；
    find_path 对请求层面的问题只返回带失败码的 PlanningResult，不抛异常。
    """

    def __init__(self,
                 config: PlannerConfig = None,
                 collision_config: CollisionConfig = None,
                 heuristic: Heuristic = None,
                 cost_functions: List[CostFunction] = None,
                 cost_weights: List[float] = None,
                 cache_dir: Optional[str] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config or PlannerConfig()
        self.collision_config = collision_config or CollisionConfig()
        self.heuristic = heuristic or EuclideanHeuristic()
        self.cost_functions = cost_functions
        self.cost_weights = cost_weights
        self.cache_dir = cache_dir
        self.clock = clock
        self.headings = HeadingSet(self.config.num_headings)
        self._contexts: Dict[str, PlanningContext] = {}

    # ------------------------------------------------------------------
    def register_model(self, vehicle, table_path: Optional[str] = None,
                       table: Optional[PrimitiveTable] = None) -> PlanningContext:
        """
        加载或生成车型的 primitive 表并构建上下文。
        优先级：table 对象 > table_path 文件 > cache_dir 缓存 > 现场生成。
        """
        res = self.config.resolution
        n = self.headings.num_headings

        if table is not None:
            if table.model_id != vehicle.model_id:
                raise ConfigError(
                    f"table is for model '{table.model_id}', not '{vehicle.model_id}'")
            if abs(table.resolution - res) > 1e-9 or table.num_headings != n:
                raise ConfigError(
                    f"table (res={table.resolution:g}, N={table.num_headings}) does not match "
                    f"planner (res={res:g}, N={n})")
        elif table_path is not None:
            table = PrimitiveTable.load(table_path, vehicle.model_id, res, n)
        elif self.cache_dir is not None:
            table = PrimitiveTable.load_or_build(vehicle, res, self.headings, self.cache_dir,
                                                 self.config.table_workers)
        else:
            table = PrimitiveTable.build(vehicle, res, self.headings, self.config.table_workers)

        selector = PrimitiveSelector(table, vehicle)
        checker = CollisionChecker(vehicle, self.headings, res, self.collision_config)
        context = PlanningContext(vehicle, self.headings, res, table, selector, checker)
        self._contexts[vehicle.model_id] = context
        logger.info("Registered model '%s' with %d primitives", vehicle.model_id, len(table))
        return context

    def context(self, model_id: str) -> PlanningContext:
        try:
            return self._contexts[model_id]
        except KeyError:
            raise InvalidInputError(f"unknown vehicle model '{model_id}'") from None

    @property
    def model_ids(self) -> List[str]:
        return sorted(self._contexts)

    # ------------------------------------------------------------------
    def find_path(self, request: PlanningRequest,
                  observer: Optional[IPlannerObserver] = None,
                  on_solution: Optional[Callable[[ImprovingSolution], None]] = None
                  ) -> PlanningResult:
        if observer is None and self.config.debug_mode:
            # 内部创建的调试观察者在请求结束时关闭日志文件
            observer = DebugObserver()
            try:
                return self._find_path(request, observer, on_solution)
            finally:
                observer.close()
        return self._find_path(request, observer or EfficientObserver(), on_solution)

    def _find_path(self, request: PlanningRequest, observer: IPlannerObserver,
                   on_solution) -> PlanningResult:
        t0 = self.clock()
        try:
            ctx = self.context(request.model_id)
            grid_map = request.grid_map
            budget = self._resolve_budget(request)
            self._check_map(ctx, grid_map)
            start = self._resolve_configuration(ctx, request.start, grid_map, "start")
            goal = self._resolve_configuration(ctx, request.goal, grid_map, "goal")
        except InvalidInputError as e:
            observer.log(f"Invalid request: {e}", 'WARN')
            return PlanningResult.failure(FailureCode.INVALID_INPUT, str(e),
                                          planning_time_s=self.clock() - t0)

        region = GoalRegion(goal, ctx.headings, request.tolerance)
        planner = self._make_planner(ctx, request.planner, on_solution)
        observer.log("Planning request", 'INFO', {
            "model": ctx.model_id, "planner": request.planner.value,
            "start": start.key, "goal": goal.key, "budget_s": budget})

        search = planner.plan(start, region, grid_map, budget, observer)
        elapsed = self.clock() - t0

        if search.status == SearchStatus.FOUND:
            return PlanningResult(success=True, path=search.path, cost=search.cost,
                                  epsilon=search.epsilon, is_partial=search.is_partial,
                                  solution_costs=search.solution_costs,
                                  expansions=search.expansions, planning_time_s=elapsed,
                                  message=search.message)
        code = FailureCode.TIMEOUT if search.status == SearchStatus.TIMEOUT \
            else FailureCode.NO_PATH_FOUND
        return PlanningResult.failure(code, search.message, expansions=search.expansions,
                                      planning_time_s=elapsed)

    # ------------------------------------------------------------------
    def _resolve_budget(self, request: PlanningRequest) -> Optional[float]:
        budget = request.time_budget_s
        if budget is None:
            budget = self.config.default_time_budget_s
        if budget is not None and budget < 0:
            raise InvalidInputError(f"time budget must be >= 0, got {budget}")
        return budget

    @staticmethod
    def _check_map(ctx: PlanningContext, grid_map):
        if grid_map is None:
            raise InvalidInputError("request has no map")
        if abs(grid_map.resolution - ctx.resolution) > 1e-9:
            raise InvalidInputError(
                f"map resolution {grid_map.resolution:g} does not match primitive table "
                f"resolution {ctx.resolution:g}")

    @staticmethod
    def _resolve_configuration(ctx: PlanningContext, state: State, grid_map,
                               label: str) -> Configuration:
        """吸附到格子中心和最近航向，并检查越界/碰撞"""
        config = Configuration.from_state(state, grid_map, ctx.headings)
        if not grid_map.in_bounds(config.ix, config.iy):
            raise InvalidInputError(f"{label} ({state.x:.3f}, {state.y:.3f}) is outside the map")
        if not ctx.checker.is_configuration_free(config, grid_map):
            raise InvalidInputError(f"{label} configuration {config.key} is in collision")
        return config

    def _make_planner(self, ctx: PlanningContext, planner_type: PlannerType, on_solution):
        kwargs = dict(heuristic=self.heuristic,
                      cost_functions=self.cost_functions,
                      weights=self.cost_weights,
                      max_expansions=self.config.max_expansions,
                      clock=self.clock)
        if planner_type == PlannerType.A_STAR:
            return AStarPlanner(ctx.selector, ctx.checker, weight=self.config.weight, **kwargs)
        return ARAStarPlanner(ctx.selector, ctx.checker,
                              epsilon_initial=self.config.epsilon_initial,
                              epsilon_decrement=self.config.epsilon_decrement,
                              on_solution=on_solution, **kwargs)
