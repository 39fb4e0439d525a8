import pytest

from lattice_planner.config import PlannerConfig
from lattice_planner.errors import ConfigError, FailureCode, PrimitiveTableError
from lattice_planner.map.occupancy_map import OccupancyMap
from lattice_planner.types import State
from lattice_planner.primitives import PrimitiveTable
from lattice_planner.planning.path_finder import PathFinder
from lattice_planner.planning.request import GoalTolerance, PlannerType, PlanningRequest
from lattice_planner.vehicles import ArticulatedModel

START = State(0.0, 0.0, 0.0)
GOAL = State(5.0, 0.0, 0.0)


def _request(grid_map, start=START, goal=GOAL, model_id="car", **kwargs):
    kwargs.setdefault("planner", PlannerType.A_STAR)
    return PlanningRequest(start, goal, model_id, grid_map, **kwargs)


class TestInvalidInput:
    def _assert_invalid(self, result, text):
        assert not result.success
        assert result.failure_code == FailureCode.INVALID_INPUT
        assert text in result.message
        assert result.expansions == 0

    def test_unknown_model(self, car_finder, scenario_map):
        self._assert_invalid(car_finder.find_path(_request(scenario_map(), model_id="forklift")),
                             "forklift")

    def test_negative_budget(self, car_finder, scenario_map):
        self._assert_invalid(car_finder.find_path(_request(scenario_map(), time_budget_s=-1.0)),
                             "budget")

    def test_missing_map(self, car_finder):
        self._assert_invalid(car_finder.find_path(_request(None)), "map")

    def test_resolution_mismatch(self, car_finder):
        grid_map = OccupancyMap(50, 50, resolution=0.2, origin=(0.0, -5.0))
        self._assert_invalid(car_finder.find_path(_request(grid_map)), "resolution")

    def test_start_outside_map(self, car_finder, scenario_map):
        result = car_finder.find_path(_request(scenario_map(), start=State(-1.0, 0.0, 0.0)))
        self._assert_invalid(result, "start")

    def test_goal_outside_map(self, car_finder, scenario_map):
        result = car_finder.find_path(_request(scenario_map(), goal=State(5.0, 50.0, 0.0)))
        self._assert_invalid(result, "goal")

    def test_start_in_collision(self, car_finder, scenario_map):
        result = car_finder.find_path(_request(scenario_map([(0, 5)])))
        self._assert_invalid(result, "start")

    def test_goal_in_collision(self, car_finder, scenario_map):
        result = car_finder.find_path(_request(scenario_map([(5, 5)]), planner=PlannerType.ARA_STAR))
        self._assert_invalid(result, "goal")


class TestGoalHandling:
    def test_start_equals_goal(self, car_finder, scenario_map):
        result = car_finder.find_path(_request(scenario_map(), goal=START))
        assert result.success
        assert result.cost == 0.0
        assert len(result.path) == 1
        assert result.primitive_ids == []

    def test_tolerance_accepts_nearby_cell(self, car_finder, scenario_map):
        exact = car_finder.find_path(_request(scenario_map()))
        loose = car_finder.find_path(_request(scenario_map(), tolerance=GoalTolerance(1.0, 0)))
        assert loose.success
        assert loose.cost < exact.cost
        assert loose.path[-1].configuration.key == (4, 5, 0)

    def test_result_serializes(self, car_finder, scenario_map):
        result = car_finder.find_path(_request(scenario_map()))
        data = result.to_dict()
        assert data["success"] is True
        assert data["failure_code"] is None
        assert data["path"][0]["primitive_id"] is None
        assert [p["key"] for p in data["path"]][-1] == [5, 5, 0]

        failed = car_finder.find_path(_request(scenario_map([(5, 5)])))
        assert failed.to_dict()["cost"] is None
        assert failed.to_dict()["failure_code"] == "INVALID_INPUT"

    def test_dense_states_follow_primitives(self, car_finder, scenario_map):
        result = car_finder.find_path(_request(scenario_map()))
        states = result.dense_states()
        expected = 1 + sum(len(s.primitive.poses) - 1 for s in result.path[1:])
        assert len(states) == expected
        assert states[0].x == pytest.approx(0.5)
        assert states[-1].x == pytest.approx(5.5)
        assert states[-1].y == pytest.approx(0.5)


class TestRegistration:
    def test_models_are_listed(self, car_finder):
        assert car_finder.model_ids == ["car"]
        ctx = car_finder.context("car")
        assert ctx.model_id == "car"
        assert ctx.table.resolution == 1.0

    def test_table_for_other_model(self, scenario_config, small_car, small_unicycle):
        table = PrimitiveTable.build(small_unicycle, 1.0, 16)
        with pytest.raises(ConfigError, match="unicycle"):
            PathFinder(scenario_config).register_model(small_car, table=table)

    def test_table_resolution_mismatch(self, scenario_config, small_car):
        table = PrimitiveTable.build(small_car, 0.5, 16)
        with pytest.raises(ConfigError, match="does not match"):
            PathFinder(scenario_config).register_model(small_car, table=table)

    def test_missing_table_file(self, tmp_path, scenario_config, small_car):
        with pytest.raises(PrimitiveTableError):
            PathFinder(scenario_config).register_model(small_car,
                                                       table_path=str(tmp_path / "car.mprim"))

    def test_table_file_for_other_resolution(self, tmp_path, scenario_config, small_car):
        path = str(tmp_path / "car.mprim")
        PrimitiveTable.build(small_car, 0.5, 16).save(path)
        with pytest.raises(PrimitiveTableError, match="resolution"):
            PathFinder(scenario_config).register_model(small_car, table_path=path)

    def test_table_from_file_and_cache(self, tmp_path, scenario_config, small_car, scenario_map):
        cache_dir = str(tmp_path / "cache")
        finder = PathFinder(scenario_config, cache_dir=cache_dir)
        ctx = finder.register_model(small_car)
        assert ctx.table.source is not None

        again = PathFinder(scenario_config)
        again.register_model(small_car, table_path=ctx.table.source)
        a = finder.find_path(_request(scenario_map()))
        b = again.find_path(_request(scenario_map()))
        assert a.success and b.success
        assert a.primitive_ids == b.primitive_ids
        assert b.cost == pytest.approx(a.cost, abs=1e-5)

    def test_invalid_planner_config(self):
        with pytest.raises(ConfigError):
            PlannerConfig(resolution=0.0)
        with pytest.raises(ConfigError):
            PlannerConfig(epsilon_initial=0.5)
        with pytest.raises(ConfigError):
            PlannerConfig(num_headings=16, weight=0.9)
        with pytest.raises(ConfigError):
            PathFinder(PlannerConfig(num_headings=12))

    def test_several_models_share_a_finder(self, scenario_config, small_car, small_unicycle,
                                           scenario_map):
        finder = PathFinder(scenario_config)
        finder.register_model(small_car)
        finder.register_model(small_unicycle)
        assert finder.model_ids == ["car", "unicycle"]
        assert finder.find_path(_request(scenario_map(), model_id="unicycle")).success
        assert finder.find_path(_request(scenario_map(), model_id="car")).success

    def test_articulated_model_registers(self):
        finder = PathFinder(PlannerConfig(resolution=0.5, num_headings=8))
        ctx = finder.register_model(ArticulatedModel())
        assert len(ctx.table) >= 8

    def test_articulated_model_plans_end_to_end(self, scenario_config, small_lhd, scenario_map):
        finder = PathFinder(scenario_config)
        finder.register_model(small_lhd)
        result = finder.find_path(_request(scenario_map(), model_id="lhd",
                                           planner=PlannerType.ARA_STAR))
        assert result.success and not result.is_partial
        assert result.epsilon == 1.0
        assert result.cost == pytest.approx(5.0)
        assert result.path[-1].configuration.key == (5, 5, 0)
