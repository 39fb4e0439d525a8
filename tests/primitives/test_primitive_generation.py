import math

import numpy as np
import pytest

from lattice_planner.types import HeadingSet, normalize_angle
from lattice_planner.primitives import FORWARD, REVERSE, PrimitiveBuilder, PrimitiveTable, solve_turn
from lattice_planner.primitives.generator import SAMPLE_FRACTION


@pytest.fixture
def car_table(small_car):
    return PrimitiveTable.build(small_car, 1.0, HeadingSet(16))


def test_solve_turn_picks_shortest_lattice_maneuver():
    phi1 = math.atan2(1, 2)
    gx, gy, l, rho, arc_first = solve_turn(0.0, phi1, 1.0, 0.36, 5)
    # 先弧线后直线，落在 (3, 1)
    assert (gx, gy) == (3, 1)
    assert arc_first
    assert l == pytest.approx(math.sqrt(5) - 1)
    assert rho == pytest.approx(2 + math.sqrt(5))


def test_solve_turn_respects_radius_and_direction():
    phi1 = math.atan2(1, 2)
    gx, gy, l, rho, _ = solve_turn(0.0, phi1, 0.5, 3.0, 20)
    assert rho >= 3.0 - 1e-9
    assert l >= 0.0

    # 右转: 半径为负
    _, gy_right, _, rho_right, _ = solve_turn(0.0, -phi1, 0.5, 3.0, 20)
    assert rho_right < 0
    assert gy_right == -gy


def test_solve_turn_rejects_degenerate_input():
    assert solve_turn(0.3, 0.3, 1.0, 1.0, 5) is None
    # 窗口太小放不下这个半径
    assert solve_turn(0.0, math.atan2(1, 2), 1.0, 50.0, 2) is None


def test_end_pose_is_exact_lattice_pose(car_table):
    headings = car_table.headings
    for p in car_table:
        x, y, theta, _ = p.poses[-1]
        assert x == p.dx * car_table.resolution
        assert y == p.dy * car_table.resolution
        assert theta == headings.angle(p.end_heading)
        assert p.poses[0][0] == 0.0 and p.poses[0][1] == 0.0
        assert abs(normalize_angle(p.poses[0][2] - headings.angle(p.start_heading))) < 1e-9


def test_samples_are_dense_and_continuous(car_table):
    step = car_table.resolution * SAMPLE_FRACTION
    for p in car_table:
        gaps = np.hypot(np.diff(p.poses[:, 0]), np.diff(p.poses[:, 1]))
        assert gaps.max() <= step + 1e-6, p


def test_cost_is_at_least_displacement(car_table):
    for p in car_table:
        displacement = math.hypot(p.dx, p.dy) * car_table.resolution
        assert p.cost >= displacement - 1e-9
        assert p.length_m >= displacement - 1e-9


def test_reverse_primitives_move_backwards(car_table):
    headings = car_table.headings
    reverse = [p for p in car_table if p.direction == REVERSE]
    assert reverse
    for p in reverse:
        theta = headings.angle(p.start_heading)
        assert p.dx * math.cos(theta) + p.dy * math.sin(theta) < 0


def test_steer_sign_of_reverse_turns(car_table):
    for p in car_table.primitives_at(0):
        if p.is_straight:
            assert p.max_steer == 0.0
            continue
        left = p.end_heading == 1
        steers = p.poses[:, 3]
        if (p.direction == FORWARD) == left:
            assert steers.max() > 0 and steers.min() >= 0
        else:
            # 倒车时航向左转需要向右打方向
            assert steers.min() < 0 and steers.max() <= 0


def test_swept_cells_cover_start_and_end(car_table):
    for p in car_table:
        cells = {tuple(c) for c in p.swept_cells}
        assert (0, 0) in cells
        assert (p.dx, p.dy) in cells
        assert tuple(p.swept_cells[0]) == (0, 0)
        assert p.swept_radius >= math.hypot(p.dx, p.dy) - 1e-9


def test_rotation_primitive(small_unicycle):
    builder = PrimitiveBuilder(small_unicycle, HeadingSet(8), 1.0)
    p = builder.rotate(7, 1, rotation_cost=0.5)
    assert p.end_heading == 0
    assert (p.dx, p.dy) == (0, 0)
    assert p.is_rotation
    assert p.cost == pytest.approx(0.5 * math.pi / 4)
    assert [tuple(c) for c in p.swept_cells] == [(0, 0)]


def test_build_is_deterministic(small_car):
    a = PrimitiveTable.build(small_car, 1.0, 16)
    b = PrimitiveTable.build(small_car, 1.0, 16, workers=4)
    assert len(a) == len(b)
    for pa, pb in zip(a, b):
        assert pa.primitive_id == pb.primitive_id
        assert (pa.start_heading, pa.end_heading, pa.dx, pa.dy) == \
               (pb.start_heading, pb.end_heading, pb.dx, pb.dy)
        np.testing.assert_array_equal(pa.poses, pb.poses)
        np.testing.assert_array_equal(pa.swept_cells, pb.swept_cells)


def test_ids_are_sequential(car_table):
    assert [p.primitive_id for p in car_table] == list(range(len(car_table)))
    for h in range(car_table.num_headings):
        assert car_table.primitives_at(h)
        assert all(p.start_heading == h for p in car_table.primitives_at(h))
