# lattice_planner/planning/planners/ara_star.py
import heapq
import itertools
import math
from enum import Enum
from typing import Callable, List, Optional

from lattice_planner.errors import ConfigError
from lattice_planner.types import Configuration
from lattice_planner.planning.planners.base import PlannerBase
from lattice_planner.planning.interfaces import IPlannerObserver
from lattice_planner.planning.node_store import NodeState, SearchNodeStore
from lattice_planner.planning.request import (GoalRegion, ImprovingSolution, SearchResult,
                                              SearchStatus)
from lattice_planner.visualization.observers import EfficientObserver


class AraPhase(Enum):
    SEARCHING = "searching"     # 还没有解
    IMPROVING = "improving"     # 已有解，正在用更小的 epsilon 改进
    EXHAUSTED = "exhausted"     # epsilon = 1 的一轮结束，或无解
    CANCELLED = "cancelled"     # 预算耗尽


class _PassCancelled(Exception):
    pass


class ARAStarPlanner(PlannerBase):
    """
    Anytime Repairing A* (ARA*)

    每一轮用 f = g + eps * h 搜索，直到目标的 g 不大于 OpenSet 的最小 f。
    一轮中被关闭后 g 又变小的节点放入 INCONS，下一轮与 OpenSet 合并。
    每轮结束报告一次解，eps 按固定步长递减，最后一轮一定是 eps = 1。
    """

    def __init__(self, *args,
                 epsilon_initial: float = 3.0,
                 epsilon_decrement: float = 0.5,
                 on_solution: Optional[Callable[[ImprovingSolution], None]] = None,
                 **kwargs):
        super().__init__(*args, **kwargs)
        if epsilon_initial < 1.0 or epsilon_decrement <= 0:
            raise ConfigError("epsilon_initial must be >= 1 and epsilon_decrement > 0")
        self.epsilon_initial = epsilon_initial
        self.epsilon_decrement = epsilon_decrement
        self.on_solution = on_solution
        self.phase = AraPhase.SEARCHING
        self.solutions: List[ImprovingSolution] = []

    def plan(self,
             start: Configuration,
             goal: GoalRegion,
             grid_map,
             time_budget_s: Optional[float] = None,
             observer: Optional[IPlannerObserver] = None) -> SearchResult:

        if observer is None:
            observer = EfficientObserver()
        observer.set_map_info(grid_map)

        self.phase = AraPhase.SEARCHING
        self.solutions = []
        self._t0 = self.clock()
        self._deadline = self.deadline(time_budget_s)
        self._goal = goal
        self._grid_map = grid_map
        self._observer = observer
        self._expansions = 0
        self._counter = itertools.count()

        def h_fn(config):
            return self.h_fn.estimate(config, goal)
        self._h_fn = h_fn

        # --- 初始化 ---
        store = SearchNodeStore()
        self._store = store
        start_node = store.get_or_create(start, h_fn)
        store.update_cost(start_node, 0.0, -1, None)
        self._goal_index = start_node.index if goal.contains(start) else -1

        eps = self.epsilon_initial
        self._open = []
        self._incons: List[int] = []
        self._push(start_node, eps)

        # --- 状态机 ---
        while True:
            if self.expired(self._deadline):
                self.phase = AraPhase.CANCELLED
                break

            try:
                self._improve_path(eps)
            except _PassCancelled:
                self.phase = AraPhase.CANCELLED
                break

            if self._goal_index == -1:
                # OpenSet 已空且没有到达目标
                self.phase = AraPhase.EXHAUSTED
                break

            self._report(eps)
            if eps <= 1.0:
                self.phase = AraPhase.EXHAUSTED
                break

            self.phase = AraPhase.IMPROVING
            eps = max(1.0, eps - self.epsilon_decrement)
            self._rebuild_open(eps)

        return self._finish()

    # ------------------------------------------------------------------
    @property
    def _g_goal(self) -> float:
        if self._goal_index == -1:
            return math.inf
        return self._store[self._goal_index].g

    def _push(self, node, eps: float):
        node.state = NodeState.OPEN
        f_val = node.g + eps * node.h
        heapq.heappush(self._open, (f_val, -node.g, next(self._counter), node.index))
        return f_val

    def _min_f(self) -> float:
        """弹出堆顶的过期条目后返回最小 f"""
        while self._open:
            _, neg_g, _, index = self._open[0]
            node = self._store[index]
            if node.state == NodeState.OPEN and -neg_g <= node.g:
                return self._open[0][0]
            heapq.heappop(self._open)
        return math.inf

    def _improve_path(self, eps: float):
        store = self._store
        observer = self._observer

        while self._g_goal > self._min_f():
            # 每次扩展前检查预算
            if self.expired(self._deadline) or self._expansions >= self.max_expansions:
                raise _PassCancelled()

            _, _, _, index = heapq.heappop(self._open)
            node = store[index]
            node.state = NodeState.CLOSED
            self._expansions += 1
            observer.record_current_expansion(node.config)

            for prim, nxt, cost in self.successors(node.config, self._grid_map):
                child = store.get_or_create(nxt, self._h_fn)
                if not store.update_cost(child, node.g + cost, node.index, prim):
                    continue
                observer.record_edge(node.config, nxt)

                if self._goal.contains(nxt) and child.g < self._g_goal:
                    self._goal_index = child.index

                if child.state == NodeState.CLOSED:
                    child.state = NodeState.INCONSISTENT
                    self._incons.append(child.index)
                elif child.state != NodeState.INCONSISTENT:
                    f_val = self._push(child, eps)
                    observer.record_open_set_node(nxt, f_val, child.h)

    def _rebuild_open(self, eps: float):
        """OPEN ∪ INCONS 按新的 eps 重新排序；CLOSED 清空"""
        self._open = []
        self._incons = []
        for node in self._store.nodes:
            if node.state in (NodeState.OPEN, NodeState.INCONSISTENT):
                self._push(node, eps)
            elif node.state == NodeState.CLOSED:
                node.state = NodeState.NEW

    def _report(self, eps: float):
        path = self._store.reconstruct_path(self._goal_index)
        solution = ImprovingSolution(cost=self._g_goal, epsilon=eps,
                                     expansions=self._expansions,
                                     elapsed_s=self.clock() - self._t0, path=path)
        self.solutions.append(solution)
        self._observer.record_solution(solution.cost, eps, path)
        self._observer.log("ARA* solution", 'INFO',
                           {"cost": solution.cost, "epsilon": eps, "expansions": self._expansions})
        if self.on_solution is not None:
            self.on_solution(solution)

    def _finish(self) -> SearchResult:
        expansions = self._expansions
        if self.solutions:
            best = self.solutions[-1]
            partial = self.phase == AraPhase.CANCELLED
            return SearchResult(SearchStatus.FOUND, path=best.path, cost=best.cost,
                                expansions=expansions, epsilon=best.epsilon,
                                is_partial=partial, solutions=list(self.solutions),
                                message="interrupted, returning best solution" if partial else "")

        if self.phase == AraPhase.CANCELLED:
            self._observer.log("ARA* cancelled before first solution", 'WARN',
                               {"expansions": expansions})
            return SearchResult(SearchStatus.TIMEOUT, expansions=expansions,
                                message="time budget exhausted before first solution")

        self._observer.log("ARA* open set is empty, no path found", 'INFO',
                           {"expansions": expansions})
        return SearchResult(SearchStatus.NO_PATH, expansions=expansions,
                            message="search space exhausted")
