import math
import unittest

import pytest

from lattice_planner.map.occupancy_map import OccupancyMap
from lattice_planner.types import Configuration, HeadingSet
from lattice_planner.planning.node_store import NodeState, SearchNodeStore
from lattice_planner.planning.request import GoalRegion, GoalTolerance
from lattice_planner.errors import InvalidInputError


@pytest.fixture
def grid_map():
    return OccupancyMap(10, 10, resolution=0.5)


def _config(grid_map, key):
    return Configuration.from_key(key, grid_map, HeadingSet(16))


def test_nodes_are_created_once(grid_map):
    store = SearchNodeStore()
    calls = []

    def h(config):
        calls.append(config.key)
        return 1.5

    a = store.get_or_create(_config(grid_map, (1, 2, 3)), h)
    b = store.get_or_create(_config(grid_map, (1, 2, 3)), h)
    assert a is b
    assert calls == [(1, 2, 3)]
    assert a.g == math.inf and a.h == 1.5
    assert a.state == NodeState.NEW
    assert store.find((1, 2, 3)) is a
    assert store.find((0, 0, 0)) is None
    assert len(store) == 1


def test_update_cost_only_on_improvement(grid_map):
    store = SearchNodeStore()
    node = store.get_or_create(_config(grid_map, (0, 0, 0)))
    assert store.update_cost(node, 5.0, -1, None)
    assert not store.update_cost(node, 5.0, 3, None)
    assert node.parent_index == -1
    assert store.update_cost(node, 4.0, 7, None)
    assert node.g == 4.0 and node.parent_index == 7


def test_reconstruct_path(grid_map):
    store = SearchNodeStore()
    keys = [(0, 0, 0), (1, 0, 0), (2, 0, 0)]
    nodes = [store.get_or_create(_config(grid_map, k)) for k in keys]
    store.update_cost(nodes[0], 0.0, -1, None)
    store.update_cost(nodes[1], 1.0, nodes[0].index, None)
    store.update_cost(nodes[2], 2.0, nodes[1].index, None)

    path = store.reconstruct_path(nodes[2].index)
    assert [step.configuration.key for step in path] == keys
    assert path[0].primitive is None


def test_reconstruct_path_detects_cycle(grid_map):
    store = SearchNodeStore()
    a = store.get_or_create(_config(grid_map, (0, 0, 0)))
    b = store.get_or_create(_config(grid_map, (1, 0, 0)))
    a.parent_index = b.index
    b.parent_index = a.index
    with pytest.raises(RuntimeError):
        store.reconstruct_path(a.index)


class TestGoalRegion(unittest.TestCase):
    def setUp(self):
        self.grid_map = OccupancyMap(10, 10, resolution=0.5)
        self.headings = HeadingSet(16)

    def _at(self, key):
        return _config(self.grid_map, key)

    def test_exact_goal(self):
        region = GoalRegion(self._at((5, 5, 0)), self.headings)
        self.assertTrue(region.contains(self._at((5, 5, 0))))
        self.assertFalse(region.contains(self._at((5, 5, 1))))
        self.assertFalse(region.contains(self._at((6, 5, 0))))

    def test_tolerance(self):
        region = GoalRegion(self._at((5, 5, 0)), self.headings, GoalTolerance(0.5, 1))
        self.assertTrue(region.contains(self._at((6, 5, 15))))
        self.assertTrue(region.contains(self._at((5, 4, 1))))
        self.assertFalse(region.contains(self._at((6, 5, 2))))
        self.assertFalse(region.contains(self._at((6, 6, 0))))
        self.assertAlmostEqual(region.distance(self._at((6, 6, 0))), math.sqrt(0.5))

    def test_negative_tolerance(self):
        with self.assertRaises(InvalidInputError):
            GoalTolerance(-0.1, 0)
        with self.assertRaises(InvalidInputError):
            GoalTolerance(0.0, -1)
