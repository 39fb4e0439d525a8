# lattice_planner/visualization/observers.py
import logging
import os
import time
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from lattice_planner.types import Configuration
from lattice_planner.planning.interfaces import IPlannerObserver

_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARN': logging.WARNING,
    'ERROR': logging.ERROR,
}


class RecordedSolution(NamedTuple):
    cost: float
    epsilon: float
    path: List[Any]


class EfficientObserver(IPlannerObserver):
    """
    默认模式：不保存任何搜索数据，只把 ERROR 打到控制台。
    """
    def set_map_info(self, map_info): pass
    def record_open_set_node(self, node, f=0.0, h=0.0): pass
    def record_current_expansion(self, node): pass
    def record_edge(self, start_node, end_node): pass
    def record_solution(self, cost, epsilon, path): pass

    def log(self, message: str, level: str = 'INFO', payload: Optional[Dict] = None):
        if level == 'ERROR':
            print(f"[ERROR] {message}")


class ExperimentObserver(IPlannerObserver):
    """
    实验模式：保存扩展顺序、入队历史、松弛边和每个解，
    供 plot_planning_result 和 benchmark 脚本使用。
    """
    def __init__(self):
        self.map_info = None
        self.expanded_nodes: List[Configuration] = []
        # (x, y, f, h)
        self.open_set_history: List[Tuple[float, float, float, float]] = []
        self.edges: List[Tuple[Configuration, Configuration]] = []
        self.solutions: List[RecordedSolution] = []

    def set_map_info(self, map_info):
        self.map_info = map_info

    def record_open_set_node(self, node: Configuration, f: float = 0.0, h: float = 0.0):
        self.open_set_history.append((node.x, node.y, f, h))

    def record_current_expansion(self, node: Configuration):
        self.expanded_nodes.append(node)

    def record_edge(self, start_node: Configuration, end_node: Configuration):
        self.edges.append((start_node, end_node))

    def record_solution(self, cost: float, epsilon: float, path: List[Any]):
        self.solutions.append(RecordedSolution(cost, epsilon, path))

    @property
    def solution_costs(self) -> List[float]:
        return [s.cost for s in self.solutions]

    def log(self, message: str, level: str = 'INFO', payload: Optional[Dict] = None):
        pass


class DebugObserver(ExperimentObserver):
    """
    Debug 模式：在实验模式的数据之外，把每次扩展、每个解和规划器日志
    写到 log_dir 下的独立日志文件 (plan_debug_<时间戳>.log)。
    用完调用 close() 释放文件句柄。
    """
    def __init__(self, log_dir: str = "logs/planning_debug"):
        super().__init__()
        self.log_dir = log_dir
        os.makedirs(self.log_dir, exist_ok=True)

        timestamp = time.strftime("%Y%m%d_%H%M%S")
        self.log_file = os.path.join(self.log_dir, f"plan_debug_{timestamp}.log")

        # 每个实例一个独立 logger，不向 root 传播
        self.logger = logging.getLogger(f"lattice_planner.debug.{timestamp}.{id(self)}")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        handler = logging.FileHandler(self.log_file, encoding='utf-8')
        handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        self.logger.addHandler(handler)

        self.logger.info("=== Debug Session Started ===")

    def set_map_info(self, map_info):
        super().set_map_info(map_info)
        self.logger.info("Map: %s", map_info)

    def record_current_expansion(self, node: Configuration):
        super().record_current_expansion(node)
        self.logger.debug("Expanding %s at (%.3f, %.3f)", node.key, node.x, node.y)

    def record_solution(self, cost: float, epsilon: float, path: List[Any]):
        super().record_solution(cost, epsilon, path)
        self.logger.info("Solution: cost=%.3f epsilon=%.2f steps=%d", cost, epsilon, len(path))

    def log(self, message: str, level: str = 'INFO', payload: Optional[Dict] = None):
        if payload:
            message = f"{message} | {payload}"
        self.logger.log(_LEVELS.get(level, logging.INFO), message)

    def close(self):
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
