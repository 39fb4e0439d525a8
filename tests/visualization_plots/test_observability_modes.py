import os

import pytest

from lattice_planner.config import PlannerConfig
from lattice_planner.types import State
from lattice_planner.planning.path_finder import PathFinder
from lattice_planner.planning.request import PlannerType, PlanningRequest
from lattice_planner.visualization.observers import EfficientObserver, ExperimentObserver, DebugObserver


@pytest.fixture
def planner_setup(car_finder, scenario_map):
    request = PlanningRequest(State(0.0, 0.0, 0.0), State(5.0, 0.0, 0.0), "car", scenario_map(),
                              planner=PlannerType.ARA_STAR)
    return car_finder, request


def test_efficient_mode(planner_setup):
    finder, request = planner_setup
    observer = EfficientObserver()
    result = finder.find_path(request, observer=observer)

    assert result.success
    assert not hasattr(observer, 'expanded_nodes')
    assert not hasattr(observer, 'solutions')


def test_experiment_mode(planner_setup):
    finder, request = planner_setup
    observer = ExperimentObserver()
    result = finder.find_path(request, observer=observer)

    assert result.success
    assert observer.map_info is request.grid_map
    assert len(observer.expanded_nodes) > 0
    assert len(observer.edges) > 0
    assert len(observer.open_set_history) > 0
    # ARA* 每一轮都报告一次解
    assert observer.solution_costs == result.solution_costs
    cost, eps, path = observer.solutions[-1]
    assert eps == 1.0
    assert [s.configuration.key for s in path] == [c.key for c in result.configurations]


def test_debug_mode(planner_setup, tmp_path):
    finder, request = planner_setup
    log_dir = str(tmp_path / "planning_debug")
    observer = DebugObserver(log_dir=log_dir)
    try:
        result = finder.find_path(request, observer=observer)
    finally:
        observer.close()

    assert result.success
    assert os.path.exists(observer.log_file)
    with open(observer.log_file, encoding='utf-8') as f:
        content = f.read()
    assert "Debug Session Started" in content
    assert "Expanding" in content
    assert "Solution: cost=" in content
    assert len(observer.expanded_nodes) > 0
    assert observer.solutions


def test_debug_mode_from_config(scenario_map, small_car, tmp_path, monkeypatch):
    # 默认日志目录是相对路径，切到临时目录下
    monkeypatch.chdir(tmp_path)
    finder = PathFinder(PlannerConfig(resolution=1.0, debug_mode=True, default_time_budget_s=None))
    finder.register_model(small_car)
    request = PlanningRequest(State(0.0, 0.0, 0.0), State(3.0, 0.0, 0.0), "car", scenario_map(),
                              planner=PlannerType.A_STAR)
    assert finder.find_path(request).success
    assert os.listdir(tmp_path / "logs" / "planning_debug")


def test_invalid_request_is_logged(scenario_map, car_finder, tmp_path):
    observer = DebugObserver(log_dir=str(tmp_path))
    try:
        request = PlanningRequest(State(0.0, 0.0, 0.0), State(5.0, 0.0, 0.0), "car",
                                  scenario_map([(5, 5)]))
        result = car_finder.find_path(request, observer=observer)
    finally:
        observer.close()

    assert not result.success
    with open(observer.log_file, encoding='utf-8') as f:
        assert "Invalid request" in f.read()
