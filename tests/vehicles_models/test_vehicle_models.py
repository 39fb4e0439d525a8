import math

import numpy as np
import pytest

from lattice_planner.errors import ConfigError
from lattice_planner.types import HeadingSet, State
from lattice_planner.primitives.primitive import MotionPrimitive, FORWARD, REVERSE, ROTATE
from lattice_planner.vehicles import (
    ArticulatedConfig, ArticulatedModel, CarConfig, CarModel, UnicycleConfig, UnicycleModel,
)


def _fake_primitive(direction=FORWARD, radius=math.inf, steer=0.0):
    poses = np.array([[0.0, 0.0, 0.0, 0.0], [1.0, 0.0, 0.0, steer]])
    return MotionPrimitive(0, 0, 0, 1, 0, 1.0, 1.0, direction, radius, poses, [(0, 0), (1, 0)])


class TestCarModel:
    def test_derived_geometry(self):
        cfg = CarConfig(wheelbase=2.0, max_steer_deg=45.0, front_hang=0.5, rear_hang=0.3,
                        width=1.0, safe_margin=0.1)
        assert cfg.min_turn_radius == pytest.approx(2.0)
        assert cfg.outline_coords[:, 0].max() == pytest.approx(2.5)
        assert cfg.outline_coords[:, 0].min() == pytest.approx(-0.3)
        assert cfg.collision_coords[:, 1].max() == pytest.approx(0.6)

    def test_invalid_config(self):
        with pytest.raises(ConfigError):
            CarConfig(max_steer_deg=0.0)
        with pytest.raises(ConfigError):
            CarConfig(wheelbase=-1.0)
        with pytest.raises(ConfigError):
            CarConfig(reverse_penalty=0.5)
        with pytest.raises(ConfigError):
            CarConfig(turn_offsets=())

    def test_footprint_follows_pose(self):
        car = CarModel(CarConfig(wheelbase=2.0, front_hang=0.5, rear_hang=0.5, width=1.0,
                                 safe_margin=0.0))
        poly = car.footprint_at(State(10.0, 5.0, math.pi / 2))[0]
        assert poly.shape == (4, 2)
        # 朝 +y 时车头在 y = 5 + 2.5
        assert poly[:, 1].max() == pytest.approx(7.5)
        assert poly[:, 1].min() == pytest.approx(4.5)
        assert poly[:, 0].min() == pytest.approx(9.5)

    def test_steer_sign_follows_radius(self, small_car):
        r = small_car.config.min_turn_radius
        assert small_car.steer_for_radius(r) == pytest.approx(small_car.config.max_steer)
        assert small_car.steer_for_radius(-r) == pytest.approx(-small_car.config.max_steer)
        assert small_car.steer_for_radius(math.inf) == 0.0

    def test_kinematic_validity(self, small_car):
        r_min = small_car.config.min_turn_radius
        assert small_car.is_kinematically_valid(_fake_primitive())
        assert small_car.is_kinematically_valid(_fake_primitive(REVERSE))
        assert small_car.is_kinematically_valid(_fake_primitive(radius=r_min))
        assert not small_car.is_kinematically_valid(_fake_primitive(radius=r_min * 0.5))
        assert not small_car.is_kinematically_valid(_fake_primitive(ROTATE, radius=0.0))

        forward_only = CarModel(CarConfig(allow_reverse=False))
        assert not forward_only.is_kinematically_valid(_fake_primitive(REVERSE))

    def test_primitives_start_with_straight(self, small_car):
        headings = HeadingSet(16)
        prims = small_car.primitives_for(0, headings, 1.0)
        assert prims[0].is_straight and prims[0].direction == FORWARD
        assert (prims[0].dx, prims[0].dy) == (1, 0)
        assert any(p.direction == REVERSE for p in prims)
        assert all(p.start_heading == 0 for p in prims)
        assert all(small_car.is_kinematically_valid(p) for p in prims)


class TestArticulatedModel:
    def test_articulation_matches_min_radius(self):
        cfg = ArticulatedConfig()
        gamma = cfg.articulation_for_radius(cfg.min_turn_radius)
        assert gamma == pytest.approx(cfg.max_articulation, abs=1e-9)
        assert cfg.articulation_for_radius(-cfg.min_turn_radius) == pytest.approx(-gamma)
        assert cfg.articulation_for_radius(math.inf) == 0.0
        # 半径越大，铰接角越小
        assert cfg.articulation_for_radius(2 * cfg.min_turn_radius) < gamma

    def test_footprint_has_two_bodies(self):
        lhd = ArticulatedModel()
        bodies = lhd.footprint_at(State(0.0, 0.0, 0.0, 0.0))
        assert len(bodies) == 2
        front, rear = bodies
        # 直线姿态: 后车体完全在前车体后方
        assert rear[:, 0].max() == pytest.approx(-lhd.config.front_length)
        assert front[:, 0].min() == pytest.approx(-lhd.config.front_length)

    def test_rear_body_swings_with_articulation(self):
        lhd = ArticulatedModel()
        joint = lhd.joint_state(State(0.0, 0.0, 0.0, 0.3))
        assert joint.x == pytest.approx(-lhd.config.front_length)
        assert joint.theta_rad == pytest.approx(-0.3)

    def test_validity_uses_articulation_limit(self):
        lhd = ArticulatedModel()
        limit = lhd.config.max_articulation
        assert lhd.is_kinematically_valid(_fake_primitive(steer=limit))
        assert not lhd.is_kinematically_valid(_fake_primitive(steer=limit + 0.01))
        assert not lhd.is_kinematically_valid(_fake_primitive(ROTATE, radius=0.0))

    def test_generated_turns_are_feasible(self):
        lhd = ArticulatedModel()
        prims = lhd.primitives_for(1, HeadingSet(16), 0.5)
        assert any(not p.is_straight for p in prims)
        for p in prims:
            assert lhd.is_kinematically_valid(p)
            if not p.is_straight:
                assert abs(p.turn_radius_m) >= lhd.config.min_turn_radius - 1e-9


class TestUnicycleModel:
    def test_rotations_and_reverse(self):
        model = UnicycleModel(UnicycleConfig(allow_reverse=False))
        prims = model.primitives_for(3, HeadingSet(16), 0.5)
        rotations = [p for p in prims if p.is_rotation]
        assert sorted(p.end_heading for p in rotations) == [2, 4]
        assert all((p.dx, p.dy) == (0, 0) for p in rotations)
        assert not any(p.direction == REVERSE for p in prims)
        assert not model.is_kinematically_valid(_fake_primitive(REVERSE))
        assert model.is_kinematically_valid(_fake_primitive(ROTATE, radius=0.0))

    def test_rotation_cost_scales_with_angle(self):
        model = UnicycleModel(UnicycleConfig(rotation_cost=2.0))
        headings = HeadingSet(4)
        rot = [p for p in model.primitives_for(0, headings, 1.0) if p.is_rotation][0]
        assert rot.cost == pytest.approx(2.0 * math.pi / 2)

    def test_optional_turns(self):
        model = UnicycleModel(UnicycleConfig(turn_radius_m=1.0))
        prims = model.primitives_for(0, HeadingSet(16), 0.5)
        assert any(not p.is_straight and not p.is_rotation for p in prims)

    def test_invalid_config(self):
        with pytest.raises(ConfigError):
            UnicycleConfig(rotation_cost=0.0)
        with pytest.raises(ConfigError):
            UnicycleConfig(width=0.0)
