import pytest

from lattice_planner.types import Configuration, HeadingSet, State
from lattice_planner.planning.costs import ClearanceCost, PrimitiveCost
from lattice_planner.planning.path_finder import PathFinder
from lattice_planner.planning.request import PlannerType, PlanningRequest


def _at(grid_map, key):
    return Configuration.from_key(key, grid_map, HeadingSet(16))


def test_clearance_cost_near_obstacle(scenario_map):
    grid_map = scenario_map([(5, 5)])
    cost = ClearanceCost(risk_dist=2.0, weight_factor=10.0)
    here = _at(grid_map, (3, 5, 0))

    # (4, 5) 紧挨障碍：d = 1 m
    assert cost.calculate(here, None, _at(grid_map, (4, 5, 0)), grid_map) == pytest.approx(10.0)
    # (2, 5) 离障碍和地图边界都是 3 m
    assert cost.calculate(here, None, _at(grid_map, (2, 5, 0)), grid_map) == 0.0


def test_clearance_cost_rejects_negative_parameters():
    with pytest.raises(ValueError):
        ClearanceCost(risk_dist=-1.0)
    with pytest.raises(ValueError):
        ClearanceCost(weight_factor=-0.5)


def test_planner_sums_weighted_costs(scenario_config, small_unicycle, scenario_map):
    clearance = ClearanceCost(risk_dist=3.0, weight_factor=1.0)
    finder = PathFinder(scenario_config, cost_functions=[PrimitiveCost(), clearance],
                        cost_weights=[1.0, 2.0])
    finder.register_model(small_unicycle)
    grid_map = scenario_map()

    result = finder.find_path(PlanningRequest(State(0.0, 0.0, 0.0), State(5.0, 0.0, 0.0),
                                              "unicycle", grid_map, planner=PlannerType.A_STAR))
    assert result.success

    expected = 0.0
    for prev, step in zip(result.path, result.path[1:]):
        expected += step.primitive.cost
        expected += 2.0 * clearance.calculate(prev.configuration, step.primitive,
                                              step.configuration, grid_map)
    assert result.cost == pytest.approx(expected)
    assert result.cost >= sum(s.primitive.cost for s in result.path[1:])
