# lattice_planner/primitives/store.py
"""
Text format of a primitive table.

    model_id car
    resolution_m 0.200000
    num_headings 16
    num_primitives 48
    primitive 0
    start_heading 0
    end_pose 1 0 0            # dx dy end_heading
    cost 0.200000
    length_m 0.200000
    direction 1
    turn_radius_m inf
    poses 5
    0.000000 0.000000 0.000000 0.000000
    ...
    swept_cells 3
    0 0
    ...

Loading is all-or-nothing: any deviation raises PrimitiveTableError
naming the offending line.
"""
import math
from typing import List, Tuple

from lattice_planner.errors import ConfigError, PrimitiveTableError
from lattice_planner.types import HeadingSet, normalize_angle
from .primitive import MotionPrimitive, FORWARD, REVERSE, ROTATE

FLOAT_FMT = "%.6f"
# 文件里浮点数保留 6 位小数，终点位姿按这个容差核对
END_POSE_TOL = 1e-4


def _f(value: float) -> str:
    return FLOAT_FMT % value


def dump_table(path, model_id: str, resolution: float, num_headings: int,
               primitives: List[MotionPrimitive]):
    lines = [
        f"model_id {model_id}",
        f"resolution_m {_f(resolution)}",
        f"num_headings {num_headings}",
        f"num_primitives {len(primitives)}",
    ]
    for p in primitives:
        lines.append(f"primitive {p.primitive_id}")
        lines.append(f"start_heading {p.start_heading}")
        lines.append(f"end_pose {p.dx} {p.dy} {p.end_heading}")
        lines.append(f"cost {_f(p.cost)}")
        lines.append(f"length_m {_f(p.length_m)}")
        lines.append(f"direction {p.direction}")
        lines.append(f"turn_radius_m {_f(p.turn_radius_m)}")
        lines.append(f"poses {len(p.poses)}")
        for row in p.poses:
            lines.append(" ".join(_f(v) for v in row))
        lines.append(f"swept_cells {len(p.swept_cells)}")
        for cx, cy in p.swept_cells:
            lines.append(f"{int(cx)} {int(cy)}")

    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")


class _LineReader:
    """逐行读取，出错时带上行号"""

    def __init__(self, path, text: str):
        self.path = path
        self.lines = text.splitlines()
        self.pos = 0

    def error(self, message: str, line_no: int = None) -> PrimitiveTableError:
        return PrimitiveTableError(message, self.path, line_no or self.pos)

    def next_tokens(self) -> List[str]:
        if self.pos >= len(self.lines):
            self.pos += 1
            raise self.error("unexpected end of file")
        line = self.lines[self.pos]
        self.pos += 1
        tokens = line.split()
        if not tokens:
            raise self.error("unexpected blank line")
        return tokens

    def field(self, name: str, count: int = 1) -> List[str]:
        tokens = self.next_tokens()
        if tokens[0] != name:
            raise self.error(f"expected '{name}', got '{tokens[0]}'")
        if len(tokens) != count + 1:
            raise self.error(f"'{name}' expects {count} value(s), got {len(tokens) - 1}")
        return tokens[1:]

    def ints(self, tokens: List[str]) -> List[int]:
        try:
            return [int(t) for t in tokens]
        except ValueError:
            raise self.error(f"expected integer(s), got {' '.join(tokens)}") from None

    def floats(self, tokens: List[str], allow_inf: bool = False) -> List[float]:
        try:
            values = [float(t) for t in tokens]
        except ValueError:
            raise self.error(f"expected number(s), got {' '.join(tokens)}") from None
        for v in values:
            if math.isnan(v) or (math.isinf(v) and not allow_inf):
                raise self.error(f"non-finite value in {' '.join(tokens)}")
        return values

    def trailing(self) -> bool:
        return any(line.strip() for line in self.lines[self.pos:])


def parse_table(path) -> Tuple[str, float, int, List[MotionPrimitive]]:
    """返回 (model_id, resolution, num_headings, primitives)"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise PrimitiveTableError(f"cannot read primitive table ({e})", path) from e
    except UnicodeDecodeError as e:
        raise PrimitiveTableError("primitive table is not a text file", path) from e

    r = _LineReader(path, text)
    model_id = r.field("model_id")[0]
    resolution = r.floats(r.field("resolution_m"))[0]
    if resolution <= 0:
        raise r.error("resolution_m must be positive")
    num_headings = r.ints(r.field("num_headings"))[0]
    try:
        headings = HeadingSet(num_headings)
    except ConfigError as e:
        raise r.error(str(e)) from None
    count = r.ints(r.field("num_primitives"))[0]
    if count <= 0:
        raise r.error("num_primitives must be positive")

    primitives = []
    for _ in range(count):
        primitives.append(_parse_primitive(r, resolution, headings))

    if r.trailing():
        raise r.error("unexpected content after last primitive", r.pos + 1)
    return model_id, resolution, num_headings, primitives


def _parse_primitive(r: _LineReader, resolution: float, headings: HeadingSet) -> MotionPrimitive:
    num_headings = headings.num_headings
    primitive_id = r.ints(r.field("primitive"))[0]
    start_heading = r.ints(r.field("start_heading"))[0]
    if not 0 <= start_heading < num_headings:
        raise r.error(f"start_heading {start_heading} out of range")
    dx, dy, end_heading = r.ints(r.field("end_pose", 3))
    if not 0 <= end_heading < num_headings:
        raise r.error(f"end_heading {end_heading} out of range")
    cost = r.floats(r.field("cost"))[0]
    if not cost > 0:
        raise r.error("cost must be positive")
    length_m = r.floats(r.field("length_m"))[0]
    if length_m < 0:
        raise r.error("length_m must be >= 0")
    direction = r.ints(r.field("direction"))[0]
    if direction not in (FORWARD, REVERSE, ROTATE):
        raise r.error(f"invalid direction {direction}")
    turn_radius = r.floats(r.field("turn_radius_m"), allow_inf=True)[0]
    if turn_radius < 0:
        raise r.error("turn_radius_m must be >= 0")

    k = r.ints(r.field("poses"))[0]
    if k < 2:
        raise r.error("a primitive needs at least 2 poses")
    poses = []
    for _ in range(k):
        tokens = r.next_tokens()
        if len(tokens) != 4:
            raise r.error("pose rows have 4 values: x y theta steer")
        poses.append(r.floats(tokens))

    # 最后一行必须落在 end_pose 声明的格点和航向上
    x, y, theta, _ = poses[-1]
    if (abs(x - dx * resolution) > END_POSE_TOL
            or abs(y - dy * resolution) > END_POSE_TOL
            or abs(normalize_angle(theta - headings.angle(end_heading))) > END_POSE_TOL):
        raise r.error(f"last pose ({x:g}, {y:g}, {theta:g}) does not match "
                      f"end_pose {dx} {dy} {end_heading}")

    m = r.ints(r.field("swept_cells"))[0]
    header_line = r.pos
    if m < 1:
        raise r.error("a primitive sweeps at least one cell")
    cells = []
    for _ in range(m):
        tokens = r.next_tokens()
        if len(tokens) != 2:
            raise r.error("swept cell rows have 2 values: cx cy")
        cells.append(tuple(r.ints(tokens)))

    for required in ((0, 0), (dx, dy)):
        if required not in cells:
            raise r.error(f"swept_cells must contain {required}", header_line)

    return MotionPrimitive(
        primitive_id=primitive_id,
        start_heading=start_heading,
        end_heading=end_heading,
        dx=dx,
        dy=dy,
        cost=cost,
        length_m=length_m,
        direction=direction,
        turn_radius_m=turn_radius,
        poses=poses,
        swept_cells=[list(c) for c in cells],
    )
