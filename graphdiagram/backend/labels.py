"""Text for edges and nodes: size estimation and placement."""

import math
from typing import NamedTuple, Optional

from graphdiagram.core.ir import Node, RenderOptions
from graphdiagram.backend.geometry import EdgeCurve, Point, fmt_number, optimize_path

CHAR_WIDTH_RATIO = 0.6
FONT_FAMILY = "Arial, sans-serif"
NODE_LABEL_GAP = 5
NODE_FONT_RATIO = 0.3
NODE_FONT_MIN = 5
NODE_FONT_MAX = 16
# Inner label paths keep this share of the edge's bulge.
LABEL_CURVE_FLATTEN = 0.6


class EdgeLabel(NamedTuple):
    """Rendered label markup, its optional textPath definition, and a bounding radius."""
    text: str
    defs: str
    center: Point
    radius: float


def escape_xml(text: str) -> str:
    """Escape XML special characters for text and attribute values."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def estimate_text_width(text: str, font_size: float) -> float:
    # Average glyph is roughly 0.6 em wide.
    return len(text) * font_size * CHAR_WIDTH_RATIO


def viewport_scale(width: float, height: float, options: RenderOptions) -> float:
    """Screen pixels per user unit, assuming the document is shown at reference_size."""
    extent = max(width, height)
    if extent <= 0:
        return 1.0
    return options.reference_size / extent


def estimate_font_size(
    text: str,
    available_width: float,
    available_height: float,
    options: RenderOptions,
    scale: float = 1.0,
) -> float:
    """
    Font size that fits ``text`` into the available box, or 0 to hide it.

    The raw size is the smaller of the width- and height-limited sizes
    after applying the fill ratio, capped at the maximum font size. If that
    size would render smaller than ``label_hide_below`` pixels the label is
    suppressed; otherwise it is raised to at least the minimum font size.
    """
    if not text or available_width <= 0 or available_height <= 0:
        return 0.0
    by_width = available_width * options.label_fill_ratio / (len(text) * CHAR_WIDTH_RATIO)
    by_height = available_height * options.label_fill_ratio
    size = min(by_width, by_height, options.label_max_font_size)
    if size * scale < options.label_hide_below:
        return 0.0
    return max(size, options.label_min_font_size)


def label_band(thickness: float) -> float:
    """Height of the strip beside an edge that its label may occupy."""
    return max(thickness * 2 + 12, 10)


def label_offset(thickness: float, font_size: float) -> float:
    """Distance from the edge centreline to the label centre."""
    return thickness / 2 + font_size * 0.75


def _upright(angle: float) -> float:
    """Turn an angle in degrees by 180 if text drawn at it would be upside down."""
    if angle > 90:
        return angle - 180
    if angle < -90:
        return angle + 180
    return angle


def straight_edge_label(curve: EdgeCurve, text: str, font_size: float, thickness: float, color: str) -> EdgeLabel:
    """Label centred on the segment, rotated along it and lifted off the line."""
    (x1, y1), (x2, y2) = curve.start, curve.end
    mx, my = (x1 + x2) / 2, (y1 + y2) / 2
    angle = _upright(math.degrees(math.atan2(y2 - y1, x2 - x1)))

    offset = label_offset(thickness, font_size)
    rad = math.radians(angle)
    x = mx + math.sin(rad) * offset
    y = my - math.cos(rad) * offset

    markup = (
        f'<text x="{fmt_number(x)}" y="{fmt_number(y)}" text-anchor="middle" dominant-baseline="middle" '
        f'transform="rotate({fmt_number(angle)}, {fmt_number(x)}, {fmt_number(y)})" '
        f'fill="{escape_xml(color)}" font-size="{fmt_number(font_size)}" font-family="{FONT_FAMILY}">'
        f"{escape_xml(text)}</text>"
    )
    radius = estimate_text_width(text, font_size) / 2 + font_size
    return EdgeLabel(markup, "", (x, y), radius)


def curved_label_path(curve: EdgeCurve, offset: float) -> tuple:
    """
    Start, control and end of the path a curved label follows.

    The path is a flatter copy of the edge curve shifted to its inner
    (concave) side, so it never crosses the edge. It always runs left to
    right so the text is never mirrored.
    """
    start, control, end = curve
    mid = ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)
    bulge = (control[0] - mid[0], control[1] - mid[1])
    bulge_len = math.hypot(*bulge)
    if bulge_len > 0:
        inward = (-bulge[0] / bulge_len, -bulge[1] / bulge_len)
    else:
        chord = math.hypot(end[0] - start[0], end[1] - start[1]) or 1.0
        inward = ((end[1] - start[1]) / chord, -(end[0] - start[0]) / chord)

    shift = (inward[0] * offset, inward[1] * offset)
    p0 = (start[0] + shift[0], start[1] + shift[1])
    p2 = (end[0] + shift[0], end[1] + shift[1])
    p1 = (
        mid[0] + bulge[0] * LABEL_CURVE_FLATTEN + shift[0],
        mid[1] + bulge[1] * LABEL_CURVE_FLATTEN + shift[1],
    )
    if p0[0] > p2[0]:
        p0, p2 = p2, p0
    return p0, p1, p2


def curved_edge_label(
    curve: EdgeCurve, path_id: str, text: str, font_size: float, thickness: float, color: str
) -> EdgeLabel:
    """Label laid along an auxiliary curve via textPath."""
    p0, p1, p2 = curved_label_path(curve, label_offset(thickness, font_size))
    d = optimize_path(
        f"M {fmt_number(p0[0])} {fmt_number(p0[1])} "
        f"Q {fmt_number(p1[0])} {fmt_number(p1[1])} {fmt_number(p2[0])} {fmt_number(p2[1])}"
    )
    defs = f'<path id="{path_id}" d="{d}" />'
    markup = (
        f'<text fill="{escape_xml(color)}" font-size="{fmt_number(font_size)}" font-family="{FONT_FAMILY}">'
        f'<textPath href="#{path_id}" startOffset="50%" text-anchor="middle" dominant-baseline="central">'
        f"{escape_xml(text)}</textPath></text>"
    )
    apex = (0.25 * p0[0] + 0.5 * p1[0] + 0.25 * p2[0], 0.25 * p0[1] + 0.5 * p1[1] + 0.25 * p2[1])
    radius = estimate_text_width(text, font_size) / 2 + font_size
    return EdgeLabel(markup, defs, apex, radius)


def edge_label(
    curve: EdgeCurve,
    text: Optional[str],
    thickness: float,
    color: str,
    options: RenderOptions,
    scale: float,
    path_id: str,
) -> Optional[EdgeLabel]:
    """Place an edge label, or return None when it is empty or too small to read."""
    if not text:
        return None
    chord = math.hypot(curve.end[0] - curve.start[0], curve.end[1] - curve.start[1])
    font_size = estimate_font_size(text, chord, label_band(thickness), options, scale)
    if font_size <= 0:
        return None
    if curve.curved:
        return curved_edge_label(curve, path_id, text, font_size, thickness, color)
    return straight_edge_label(curve, text, font_size, thickness, color)


def node_font_size(node: Node) -> float:
    return round(min(NODE_FONT_MAX, max(NODE_FONT_MIN, node.size * NODE_FONT_RATIO)), 1)


def node_label(node: Node, options: RenderOptions, scale: float) -> str:
    """Label to the right of the circle; empty when it would be illegible."""
    if not node.label:
        return ""
    font_size = node_font_size(node)
    if font_size * scale < options.label_hide_below:
        return ""
    x = node.x + node.size + NODE_LABEL_GAP
    y = node.y + font_size / 3
    return (
        f'<text x="{fmt_number(x)}" y="{fmt_number(y)}" font-size="{fmt_number(font_size)}" '
        f'fill="black" dominant-baseline="middle">{escape_xml(node.label)}</text>'
    )
