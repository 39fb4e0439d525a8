# lattice_planner/planning/interfaces.py
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from lattice_planner.types import Configuration


class IPlannerObserver(ABC):
    """
    搜索过程的旁路记录接口。

    规划器只在固定的几个点回调观察者：节点入队、节点出队扩展、
    松弛成功的边、找到一个解。观察者不允许修改传入的对象，
    实现可以是空操作 (EfficientObserver)，也可以把数据留给绘图或写日志。
    """

    @abstractmethod
    def set_map_info(self, map_info: Any):
        """每次 plan() 开始时调用一次，传入本次请求的地图快照"""

    @abstractmethod
    def record_open_set_node(self, node: Configuration, f: float = 0.0, h: float = 0.0):
        """节点以代价 f (已乘 epsilon/weight) 入队"""

    @abstractmethod
    def record_current_expansion(self, node: Configuration):
        pass

    @abstractmethod
    def record_edge(self, start_node: Configuration, end_node: Configuration):
        """一条 primitive 边让 end_node 的 g 变小"""

    @abstractmethod
    def record_solution(self, cost: float, epsilon: float, path: List[Any]):
        """A* 在结束时调用一次；ARA* 每轮结束调用一次，cost 不增"""

    @abstractmethod
    def log(self, message: str, level: str = 'INFO', payload: Optional[Dict] = None):
        """
        :param level: 'DEBUG' / 'INFO' / 'WARN' / 'ERROR'
        :param payload: 附加的结构化字段，例如 {"expansions": 120}
        """
