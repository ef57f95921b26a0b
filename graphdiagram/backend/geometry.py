"""
Vector geometry for edges.

Every edge is emitted as a filled outline rather than a stroked line, so
thickness, arrowheads and clipping at the node circles are all exact path
data. Points are plain ``(x, y)`` tuples.

Curved edges are quadratic beziers with a single control point displaced
perpendicular to the chord. Because a quadratic/circle intersection has no
convenient closed form on the relevant arc, the clip points are found
numerically (uniform sampling, then bisection) by
:func:`curve_circle_intersection`.
"""

import math
import re
from typing import NamedTuple, Optional, Tuple

from graphdiagram.core.ir import EdgeKind, Node

Point = Tuple[float, float]

BASE_CURVATURE = 0.12
PARALLEL_SPREAD = 0.8

ARROW_LENGTH_RATIO = 2.5
ARROW_WIDTH_RATIO = 1.8
ARROW_MIN_LENGTH = 8.0
ARROW_MAX_LENGTH = 40.0
ARROW_MIN_WIDTH = 6.0
ARROW_MAX_WIDTH = 30.0

INTERSECTION_SAMPLES = 100
INTERSECTION_ITERATIONS = 20


class EdgeCurve(NamedTuple):
    """Clipped edge centreline. ``control`` is None for straight edges."""
    start: Point
    control: Optional[Point]
    end: Point

    @property
    def curved(self) -> bool:
        return self.control is not None


def _distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def _unit(a: Point, b: Point) -> Optional[Point]:
    length = _distance(a, b)
    if length == 0:
        return None
    return (b[0] - a[0]) / length, (b[1] - a[1]) / length


def quad_point(p0: Point, p1: Point, p2: Point, t: float) -> Point:
    mt = 1 - t
    return (
        mt * mt * p0[0] + 2 * mt * t * p1[0] + t * t * p2[0],
        mt * mt * p0[1] + 2 * mt * t * p1[1] + t * t * p2[1],
    )


def split_quad(p0: Point, p1: Point, p2: Point, t0: float, t1: float) -> EdgeCurve:
    """Exact sub-curve of a quadratic bezier between parameters t0 and t1."""
    def blossom(u: float, v: float) -> Point:
        a = (1 - u) * (1 - v)
        b = (1 - u) * v + u * (1 - v)
        c = u * v
        return (a * p0[0] + b * p1[0] + c * p2[0], a * p0[1] + b * p1[1] + c * p2[1])

    return EdgeCurve(blossom(t0, t0), blossom(t0, t1), blossom(t1, t1))


def control_point(start: Point, end: Point, curvature: float = 0.0) -> Point:
    """
    Control point of the quadratic curve between two centres.

    The chord midpoint is pushed along the chord's left-hand normal by
    ``distance * (0.12 + 0.12 * curvature)``.
    """
    mid = ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)
    distance = _distance(start, end)
    if distance == 0:
        return mid
    offset = distance * (BASE_CURVATURE + BASE_CURVATURE * curvature)
    px = -(end[1] - start[1]) / distance
    py = (end[0] - start[0]) / distance
    return mid[0] + px * offset, mid[1] + py * offset


def curvature_multiplier(index: int, count: int) -> float:
    """Fan-out factor for edge ``index`` of ``count`` parallel edges."""
    if count <= 1:
        return 0.0
    return (index - (count - 1) / 2) * PARALLEL_SPREAD


def curve_circle_intersection(
    p0: Point,
    p1: Point,
    p2: Point,
    center: Point,
    radius: float,
    from_start: bool = True,
    samples: int = INTERSECTION_SAMPLES,
    iterations: int = INTERSECTION_ITERATIONS,
) -> float:
    """
    Parameter t where the curve crosses the circle ``(center, radius)``.

    The curve is sampled at ``samples + 1`` uniform parameters to find the
    point whose distance to the centre is closest to the radius, then the
    bracket around it is bisected ``iterations`` times. ``from_start``
    says which side of the crossing lies inside the circle: True for a
    circle around the curve's start, False for one around its end.
    """
    best_t = 0.0 if from_start else 1.0
    best_gap = math.inf
    for i in range(samples + 1):
        t = i / samples
        gap = abs(_distance(quad_point(p0, p1, p2, t), center) - radius)
        if gap < best_gap:
            best_gap = gap
            best_t = t

    lo = max(0.0, best_t - 1 / samples)
    hi = min(1.0, best_t + 1 / samples)
    for _ in range(iterations):
        mid = (lo + hi) / 2
        inside = _distance(quad_point(p0, p1, p2, mid), center) < radius
        if inside == from_start:
            lo = mid
        else:
            hi = mid
    return (lo + hi) / 2


def edge_curve(source: Node, target: Node, curved: bool, curvature: float = 0.0) -> Optional[EdgeCurve]:
    """
    Centreline of an edge clipped to both node circles.

    Returns None when the circles overlap, since there is nothing to draw.
    """
    src = (source.x, source.y)
    tgt = (target.x, target.y)
    distance = _distance(src, tgt)
    if distance == 0 or distance < source.size + target.size:
        return None

    if curved:
        cp = control_point(src, tgt, curvature)
        t0 = curve_circle_intersection(src, cp, tgt, src, source.size, from_start=True)
        t1 = curve_circle_intersection(src, cp, tgt, tgt, target.size, from_start=False)
        return split_quad(src, cp, tgt, t0, t1)

    ux = (tgt[0] - src[0]) / distance
    uy = (tgt[1] - src[1]) / distance
    start = (src[0] + ux * source.size, src[1] + uy * source.size)
    end = (tgt[0] - ux * target.size, tgt[1] - uy * target.size)
    return EdgeCurve(start, None, end)


def arrow_size(thickness: float, available: float) -> Tuple[float, float]:
    """Arrowhead (length, width), scaled down to fit ``available`` length."""
    length = min(max(thickness * ARROW_LENGTH_RATIO, ARROW_MIN_LENGTH), ARROW_MAX_LENGTH)
    width = min(max(thickness * ARROW_WIDTH_RATIO, ARROW_MIN_WIDTH), ARROW_MAX_WIDTH)
    if available > 0 and length > available:
        scale = available / length
        length *= scale
        width *= scale
    return length, width


def fmt_number(value: float) -> str:
    """Compact decimal for markup: at most three places, no trailing zeros."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _pt(p: Point) -> str:
    return f"{fmt_number(p[0])} {fmt_number(p[1])}"


def _offset(p: Point, v: Point, sign: float = 1.0) -> Point:
    return p[0] + sign * v[0], p[1] + sign * v[1]


def _band(a: Point, b: Point, perp: Point) -> str:
    return (
        f"M {_pt(_offset(a, perp))} L {_pt(_offset(a, perp, -1))} "
        f"L {_pt(_offset(b, perp, -1))} L {_pt(_offset(b, perp))} Z"
    )


def _arrowhead(tip: Point, base: Point, width: float) -> str:
    u = _unit(base, tip)
    if u is None:
        return ""
    perp = (-u[1] * width / 2, u[0] * width / 2)
    return f" M {_pt(tip)} L {_pt(_offset(base, perp))} L {_pt(_offset(base, perp, -1))} Z"


def straight_path(start: Point, end: Point, thickness: float) -> str:
    """Rectangle of the given thickness between two points."""
    return arrow_path(start, end, thickness, start_arrow=False, end_arrow=False)


def arrow_path(start: Point, end: Point, thickness: float, start_arrow: bool, end_arrow: bool) -> str:
    """Straight body plus optional arrowheads; the body stops where a head begins."""
    u = _unit(start, end)
    if u is None:
        return ""
    heads = int(start_arrow) + int(end_arrow)
    head_length, head_width = arrow_size(thickness, _distance(start, end) / max(heads, 1))

    body_start = _offset(start, (u[0] * head_length, u[1] * head_length)) if start_arrow else start
    body_end = _offset(end, (u[0] * head_length, u[1] * head_length), -1) if end_arrow else end
    perp = (-u[1] * thickness / 2, u[0] * thickness / 2)

    path = _band(body_start, body_end, perp)
    if start_arrow:
        path += _arrowhead(start, body_start, head_width)
    if end_arrow:
        path += _arrowhead(end, body_end, head_width)
    return path


def _normal(a: Point, b: Point, fallback: Point = (0.0, 1.0)) -> Point:
    u = _unit(a, b)
    if u is None:
        return fallback
    return -u[1], u[0]


def ribbon_path(start: Point, control: Point, end: Point, thickness: float) -> str:
    """
    Closed outline around a quadratic curve.

    The two sides are quadratic curves offset by half the thickness along
    the start and end normals, with the control point offset along their
    average.
    """
    half = thickness / 2
    n_start = _normal(start, control)
    n_end = _normal(control, end)
    avg = ((n_start[0] + n_end[0]) / 2, (n_start[1] + n_end[1]) / 2)
    avg_len = math.hypot(*avg)
    n_mid = (avg[0] / avg_len, avg[1] / avg_len) if avg_len > 0 else n_start

    def shift(p: Point, n: Point, sign: float) -> Point:
        return p[0] + sign * n[0] * half, p[1] + sign * n[1] * half

    return (
        f"M {_pt(shift(start, n_start, 1))}"
        f" Q {_pt(shift(control, n_mid, 1))} {_pt(shift(end, n_end, 1))}"
        f" L {_pt(shift(end, n_end, -1))}"
        f" Q {_pt(shift(control, n_mid, -1))} {_pt(shift(start, n_start, -1))} Z"
    )


def curved_arrow_path(
    start: Point, control: Point, end: Point, thickness: float, start_arrow: bool, end_arrow: bool
) -> str:
    """Ribbon plus arrowheads aligned with the curve tangent at each end."""
    heads = int(start_arrow) + int(end_arrow)
    head_length, head_width = arrow_size(thickness, _distance(start, end) / max(heads, 1))

    t0, t1 = 0.0, 1.0
    if start_arrow:
        t0 = curve_circle_intersection(start, control, end, start, head_length, from_start=True)
    if end_arrow:
        t1 = curve_circle_intersection(start, control, end, end, head_length, from_start=False)
    body = split_quad(start, control, end, t0, t1)

    path = ribbon_path(body.start, body.control, body.end, thickness)
    if start_arrow:
        path += _arrowhead(start, body.start, head_width)
    if end_arrow:
        path += _arrowhead(end, body.end, head_width)
    return path


def edge_path(source: Node, target: Node, kind: EdgeKind, thickness: float, curvature: float = 0.0) -> str:
    """Absolute path data for one edge, or "" when the nodes overlap."""
    curve = edge_curve(source, target, kind.is_curved or curvature != 0, curvature)
    if curve is None:
        return ""
    return curve_path(curve, kind, thickness)


def curve_path(curve: EdgeCurve, kind: EdgeKind, thickness: float) -> str:
    """Outline for an already clipped centreline, with the arrowheads ``kind`` asks for."""
    if curve.curved:
        if kind.end_arrow:
            return curved_arrow_path(curve.start, curve.control, curve.end, thickness, kind.start_arrow, True)
        return ribbon_path(curve.start, curve.control, curve.end, thickness)
    if kind.end_arrow:
        return arrow_path(curve.start, curve.end, thickness, kind.start_arrow, True)
    return straight_path(curve.start, curve.end, thickness)


_COMMAND = re.compile(r"[MLQCZ][^MLQCZ]*")
_ARITY = {"M": 2, "L": 2, "Q": 4, "C": 6}


def _round1(value: float) -> float:
    return round(value, 1) + 0.0


def _fmt1(value: float) -> str:
    value = _round1(value)
    if value == 0:
        return "0"
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


def optimize_path(path_data: str) -> str:
    """
    Rewrite absolute M/L/Q/C/Z commands as relative ones rounded to 0.1.

    Deltas are taken between already-rounded absolute points, so rounding
    error does not accumulate along the path.
    """
    commands = _COMMAND.findall(path_data)
    if not commands:
        return path_data

    out = []
    cx = cy = 0.0
    for command in commands:
        letter = command[0]
        if letter == "Z":
            out.append("z")
            continue
        numbers = [float(n) for n in re.split(r"[\s,]+", command[1:].strip()) if n]
        if len(numbers) < _ARITY[letter]:
            continue
        points = [
            (_round1(numbers[i]), _round1(numbers[i + 1]))
            for i in range(0, _ARITY[letter], 2)
        ]
        if letter == "M":
            out.append(f"M{_fmt1(points[0][0])},{_fmt1(points[0][1])}")
        else:
            out.append(letter.lower() + ",".join(
                f"{_fmt1(x - cx)},{_fmt1(y - cy)}" for x, y in points
            ))
        cx, cy = points[-1]
    return "".join(out)
