# lattice_planner/planning/node_store.py
import math
from enum import Enum
from typing import Dict, List, Optional, Tuple

from lattice_planner.types import Configuration
from lattice_planner.primitives.primitive import MotionPrimitive
from .request import PathStep


class NodeState(Enum):
    NEW = 0
    OPEN = 1
    CLOSED = 2
    INCONSISTENT = 3   # ARA*: 关闭后 g 又变小，等下一轮再处理


class SearchNode:
    __slots__ = ("index", "config", "g", "h", "parent_index", "primitive", "state")

    def __init__(self, index: int, config: Configuration, h: float = 0.0):
        self.index = index
        self.config = config
        self.g = math.inf
        self.h = h
        self.parent_index = -1
        self.primitive: Optional[MotionPrimitive] = None
        self.state = NodeState.NEW

    @property
    def key(self) -> Tuple[int, int, int]:
        return self.config.key

    def __repr__(self) -> str:
        return (f"SearchNode(#{self.index}, key={self.key}, g={self.g:.3f}, h={self.h:.3f}, "
                f"parent={self.parent_index}, {self.state.name})")


class SearchNodeStore:
    """
    节点池：列表存节点，字典按离散位姿索引。
    父节点用下标引用，节点从不删除，open/closed 只是标记。
    每个请求新建一个，用完整体丢弃。
    """

    def __init__(self):
        self.nodes: List[SearchNode] = []
        self._index: Dict[Tuple[int, int, int], int] = {}

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> SearchNode:
        return self.nodes[index]

    def find(self, key) -> Optional[SearchNode]:
        idx = self._index.get(key)
        return None if idx is None else self.nodes[idx]

    def get_or_create(self, config: Configuration, heuristic_fn=None) -> SearchNode:
        """
        返回 config 对应的节点；第一次访问时创建 (g = inf)，
        h 只在创建时计算一次。
        """
        idx = self._index.get(config.key)
        if idx is not None:
            return self.nodes[idx]
        node = SearchNode(len(self.nodes), config,
                          heuristic_fn(config) if heuristic_fn is not None else 0.0)
        self._index[config.key] = node.index
        self.nodes.append(node)
        return node

    def update_cost(self, node: SearchNode, g: float, parent_index: int,
                    primitive: Optional[MotionPrimitive]) -> bool:
        """g 严格变小时更新并返回 True"""
        if g < node.g:
            node.g = g
            node.parent_index = parent_index
            node.primitive = primitive
            return True
        return False

    def reconstruct_path(self, index: int) -> List[PathStep]:
        """沿父节点下标回溯到根节点，再反转"""
        steps = []
        while index != -1:
            node = self.nodes[index]
            steps.append(PathStep(node.config, node.primitive))
            index = node.parent_index
            if len(steps) > len(self.nodes):
                raise RuntimeError("cycle in parent links")
        steps.reverse()
        return steps
