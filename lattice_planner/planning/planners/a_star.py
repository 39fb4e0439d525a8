# lattice_planner/planning/planners/a_star.py
import heapq
import itertools
from typing import Optional

from lattice_planner.types import Configuration
from lattice_planner.planning.planners.base import PlannerBase
from lattice_planner.planning.interfaces import IPlannerObserver
from lattice_planner.planning.node_store import NodeState, SearchNodeStore
from lattice_planner.planning.request import GoalRegion, SearchResult, SearchStatus
from lattice_planner.visualization.observers import EfficientObserver


class AStarPlanner(PlannerBase):
    """
    Lattice 上的 (加权) A*。

    工作流程：
    1. OpenSet 按 (f, -g, 入队序号) 排序：f 相同时优先 g 大的节点，再按入队顺序。
    2. 后继由 PrimitiveSelector 给出，经 CollisionChecker 检查扫掠格子。
    3. 节点出队时做目标检测。
    4. 每次扩展前检查时间预算和扩展次数上限。
    """

    def __init__(self, *args, weight: float = 1.0, **kwargs):
        super().__init__(*args, **kwargs)
        self.weight = weight

    def plan(self,
             start: Configuration,
             goal: GoalRegion,
             grid_map,
             time_budget_s: Optional[float] = None,
             observer: Optional[IPlannerObserver] = None) -> SearchResult:

        # 1. 初始化观察者
        if observer is None:
            observer = EfficientObserver()
        observer.set_map_info(grid_map)
        deadline = self.deadline(time_budget_s)

        def h_fn(config):
            return self.h_fn.estimate(config, goal)

        # 2. 初始化核心容器
        store = SearchNodeStore()
        counter = itertools.count()
        start_node = store.get_or_create(start, h_fn)
        store.update_cost(start_node, 0.0, -1, None)
        start_node.state = NodeState.OPEN

        # OpenSet: (f, -g, seq, node_index)
        open_set = [(self.weight * start_node.h, -0.0, next(counter), start_node.index)]
        expansions = 0

        # 3. 主循环
        while open_set:
            if self.expired(deadline):
                observer.log("A* time budget exhausted", 'WARN', {"expansions": expansions})
                return SearchResult(SearchStatus.TIMEOUT, expansions=expansions,
                                    message="time budget exhausted")
            if expansions >= self.max_expansions:
                observer.log("A* expansion limit reached", 'WARN', {"expansions": expansions})
                return SearchResult(SearchStatus.TIMEOUT, expansions=expansions,
                                    message=f"expansion limit {self.max_expansions} reached")

            _, neg_g, _, index = heapq.heappop(open_set)
            node = store[index]
            # 惰性删除：已关闭或已被更优路径覆盖的旧条目
            if node.state == NodeState.CLOSED or -neg_g > node.g:
                continue
            node.state = NodeState.CLOSED
            expansions += 1
            observer.record_current_expansion(node.config)

            # A. 终止条件
            if goal.contains(node.config):
                path = store.reconstruct_path(node.index)
                observer.record_solution(node.g, 1.0, path)
                observer.log("A* found path", 'INFO',
                             {"cost": node.g, "expansions": expansions, "nodes": len(store)})
                return SearchResult(SearchStatus.FOUND, path=path, cost=node.g,
                                    expansions=expansions, epsilon=self.weight)

            # B. 扩展邻居
            for prim, nxt, cost in self.successors(node.config, grid_map):
                child = store.get_or_create(nxt, h_fn)
                if child.state == NodeState.CLOSED:
                    continue
                if store.update_cost(child, node.g + cost, node.index, prim):
                    child.state = NodeState.OPEN
                    f_val = child.g + self.weight * child.h
                    heapq.heappush(open_set, (f_val, -child.g, next(counter), child.index))
                    observer.record_open_set_node(nxt, f_val, child.h)
                    observer.record_edge(node.config, nxt)

        observer.log("A* open set is empty, no path found", 'INFO', {"expansions": expansions})
        return SearchResult(SearchStatus.NO_PATH, expansions=expansions,
                            message="search space exhausted")
