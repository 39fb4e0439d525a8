# lattice_planner/primitives/generator.py
"""
Offline primitive generation shared by all vehicle models.

Every maneuver is either a straight segment, a rotation in place, or a
"straight + arc" / "arc + straight" pair that ends exactly on a lattice
point with an exact lattice heading. The swept cells are obtained by
rasterising the vehicle footprint at dense samples along the maneuver.
"""
import math
from typing import Callable, List, Optional, Tuple

import numpy as np

from lattice_planner.types import HeadingSet, State, normalize_angle
from lattice_planner.collision.geometry import polygon_cells
from .primitive import MotionPrimitive, FORWARD, REVERSE, ROTATE

# 采样间距 = resolution * SAMPLE_FRACTION
SAMPLE_FRACTION = 0.25
# 原地旋转的最大采样角步长 [rad]
ROTATION_SAMPLE_STEP = 0.1


def solve_turn(phi0: float, phi1: float, resolution: float, min_radius: float,
               window: int) -> Optional[Tuple[int, int, float, float, bool]]:
    """
    在 [-window, window]^2 的格点中寻找从行进方向 phi0 转到 phi1 的最短可行机动。

    两种构型都会尝试：
      straight-then-arc: end = l*(c0, s0) + rho*(s1 - s0, c0 - c1)
      arc-then-straight: end = rho*(s1 - s0, c0 - c1) + l*(c1, s1)
    rho 为带符号半径 (左转为正)。可行条件：l >= 0，rho 与转向同号，|rho| >= min_radius。

    Returns:
        (dx_cells, dy_cells, l, rho, arc_first)，没有可行解时返回 None
    """
    delta = normalize_angle(phi1 - phi0)
    if abs(delta) < 1e-9:
        return None
    sign = 1.0 if delta > 0 else -1.0

    rng = np.arange(-window, window + 1)
    gy, gx = np.meshgrid(rng, rng, indexing='ij')
    gx = gx.ravel()
    gy = gy.ravel()
    dx = gx * resolution
    dy = gy * resolution
    nonzero = (gx != 0) | (gy != 0)

    s0, c0 = math.sin(phi0), math.cos(phi0)
    s1, c1 = math.sin(phi1), math.cos(phi1)

    best = None
    best_len = float('inf')
    for arc_first in (False, True):
        if arc_first:
            a11, a12, a21, a22 = c1, s1 - s0, s1, c0 - c1
        else:
            a11, a12, a21, a22 = c0, s1 - s0, s0, c0 - c1
        det = a11 * a22 - a12 * a21
        if abs(det) < 1e-12:
            continue

        l = (dx * a22 - a12 * dy) / det
        rho = (a11 * dy - a21 * dx) / det
        feasible = (nonzero
                    & (l >= -1e-9)
                    & (rho * sign > 0)
                    & (np.abs(rho) >= min_radius - 1e-9))
        if not np.any(feasible):
            continue

        length = np.where(feasible, np.maximum(l, 0.0) + np.abs(rho) * abs(delta), np.inf)
        i = int(np.argmin(length))
        if length[i] < best_len - 1e-9:
            best_len = float(length[i])
            best = (int(gx[i]), int(gy[i]), float(max(l[i], 0.0)), float(rho[i]), arc_first)
    return best


def sample_turn(phi0: float, phi1: float, l: float, rho: float, arc_first: bool,
                step: float) -> List[Tuple[float, float, float, float]]:
    """
    沿 straight/arc 组合采样，返回 [(x, y, travel_angle, radius)]，
    radius 在直线段为 inf。
    """
    samples = [(0.0, 0.0, phi0, math.inf if not arc_first else rho)]
    x, y = 0.0, 0.0

    def straight(x, y, phi, length):
        n = max(1, int(math.ceil(length / step)))
        c, s = math.cos(phi), math.sin(phi)
        for i in range(1, n + 1):
            t = length * i / n
            samples.append((x + c * t, y + s * t, phi, math.inf))
        return x + c * length, y + s * length

    def arc(x, y, phi_a, phi_b):
        sweep = normalize_angle(phi_b - phi_a)
        n = max(1, int(math.ceil(abs(rho * sweep) / step)))
        cx = x - rho * math.sin(phi_a)
        cy = y + rho * math.cos(phi_a)
        for i in range(1, n + 1):
            phi = phi_a + sweep * i / n
            samples.append((cx + rho * math.sin(phi), cy - rho * math.cos(phi), phi, rho))
        return cx + rho * math.sin(phi_b), cy - rho * math.cos(phi_b)

    if arc_first:
        x, y = arc(x, y, phi0, phi1)
        if l > 1e-9:
            straight(x, y, phi1, l)
    else:
        if l > 1e-9:
            x, y = straight(x, y, phi0, l)
        arc(x, y, phi0, phi1)
    return samples


class PrimitiveBuilder:
    """
    把几何机动变成 MotionPrimitive：采样位姿、计算代价、栅格化扫掠格子。
    primitive_id 由 PrimitiveTable 统一分配，这里先置为 -1。
    """

    def __init__(self, vehicle, headings: HeadingSet, resolution: float,
                 steer_for_radius: Callable[[float], float] = None):
        self.vehicle = vehicle
        self.headings = headings
        self.resolution = resolution
        self.step = resolution * SAMPLE_FRACTION
        self.steer_for_radius = steer_for_radius or (lambda radius: 0.0)

    # ------------------------------------------------------------------
    def straight(self, heading: int, direction: int = FORWARD,
                 cost_factor: float = 1.0) -> MotionPrimitive:
        vx, vy = self.headings.vector(heading)
        if direction == REVERSE:
            vx, vy = -vx, -vy
        theta = self.headings.angle(heading)
        length = math.hypot(vx, vy) * self.resolution

        n = max(1, int(math.ceil(length / self.step)))
        poses = [(vx * self.resolution * i / n, vy * self.resolution * i / n, theta, 0.0)
                 for i in range(n + 1)]
        return self._make(heading, heading, vx, vy, poses, length * cost_factor, length,
                          direction, math.inf)

    def turn(self, heading: int, offset: int, min_radius: float, direction: int = FORWARD,
             turn_penalty: float = 1.0, cost_factor: float = 1.0) -> Optional[MotionPrimitive]:
        """航向从 heading 变到 heading + offset 的最短可行转弯"""
        end_heading = self.headings.wrap(heading + offset)
        theta0 = self.headings.angle(heading)
        theta1 = self.headings.angle(end_heading)
        # 倒车时在行进方向 (航向 + pi) 上求解同样的几何
        flip = math.pi if direction == REVERSE else 0.0
        phi0 = normalize_angle(theta0 + flip)
        phi1 = normalize_angle(theta1 + flip)

        window = int(math.ceil(3.0 * max(min_radius, self.resolution) / self.resolution)) + 2
        solution = solve_turn(phi0, phi1, self.resolution, min_radius, window)
        if solution is None:
            return None
        gx, gy, l, rho, arc_first = solution

        poses = []
        for x, y, phi, radius in sample_turn(phi0, phi1, l, rho, arc_first, self.step):
            steer = direction * self.steer_for_radius(radius)
            poses.append((x, y, normalize_angle(phi - flip), steer))

        arc_len = abs(rho * normalize_angle(phi1 - phi0))
        length = l + arc_len
        cost = (l + arc_len * turn_penalty) * cost_factor
        return self._make(heading, end_heading, gx, gy, poses, cost, length, direction, abs(rho))

    def rotate(self, heading: int, offset: int, rotation_cost: float) -> MotionPrimitive:
        end_heading = self.headings.wrap(heading + offset)
        theta0 = self.headings.angle(heading)
        sweep = normalize_angle(self.headings.angle(end_heading) - theta0)
        n = max(1, int(math.ceil(abs(sweep) / ROTATION_SAMPLE_STEP)))
        poses = [(0.0, 0.0, normalize_angle(theta0 + sweep * i / n), 0.0) for i in range(n + 1)]
        return self._make(heading, end_heading, 0, 0, poses, abs(sweep) * rotation_cost, 0.0,
                          ROTATE, 0.0)

    # ------------------------------------------------------------------
    def _make(self, start_heading, end_heading, dx, dy, poses, cost, length, direction,
              turn_radius) -> MotionPrimitive:
        poses = np.array(poses, dtype=float)
        # 终点吸附到精确的格点和航向，消除积分误差
        poses[-1, 0] = dx * self.resolution
        poses[-1, 1] = dy * self.resolution
        poses[-1, 2] = self.headings.angle(end_heading)

        return MotionPrimitive(
            primitive_id=-1,
            start_heading=start_heading,
            end_heading=end_heading,
            dx=int(dx),
            dy=int(dy),
            cost=float(cost),
            length_m=float(length),
            direction=direction,
            turn_radius_m=float(turn_radius),
            poses=poses,
            swept_cells=self.swept_cells(poses),
        )

    def swept_cells(self, poses: np.ndarray) -> np.ndarray:
        """
        所有采样位姿下车辆轮廓覆盖的格子并集 (相对起点格子)。
        起点格子占据 [0, res) x [0, res)，参考点在格子中心。
        """
        half = self.resolution / 2.0
        seen = {}
        for x, y, theta, steer in poses:
            state = State(half + x, half + y, theta, steer)
            for poly in self.vehicle.footprint_at(state):
                for cx, cy in polygon_cells(poly, self.resolution):
                    key = (int(cx), int(cy))
                    if key not in seen:
                        seen[key] = len(seen)
        return np.array(list(seen.keys()), dtype=np.int32).reshape(-1, 2)

