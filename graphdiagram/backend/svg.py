"""
SVG backend for positioned graph diagrams.

The document has three layers: ``edges`` (filled outline paths),
``labels`` (edge text, with textPath definitions for curved edges) and
``nodes`` (circles, icons and node labels, with icon symbol definitions).
The viewBox is the tight bounding box of everything drawn plus padding.

Example:
    >>> from graphdiagram import parse, apply_layout, SvgExporter
    >>>
    >>> graph = parse("graphDiagram Demo\\nAlice->Bob: Hi")
    >>> apply_layout(graph, "circular")
    >>> svg_string = SvgExporter.to_svg(graph)
    >>> with open("output.svg", "w") as f:
    ...     f.write(svg_string)
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import httpx

from graphdiagram.core.ir import Edge, GraphModel, Node, RenderOptions
from graphdiagram.backend import geometry
from graphdiagram.backend.geometry import EdgeCurve, fmt_number
from graphdiagram.backend.icons import IconSymbol, icon_markup, load_symbols
from graphdiagram.backend.labels import (
    EdgeLabel, edge_label, escape_xml, estimate_text_width, node_font_size, node_label, viewport_scale,
    NODE_LABEL_GAP,
)

__all__ = [
    "SvgExporter", "render", "Bounds", "EdgePlan", "NodeRenderer", "EdgeRenderer", "assign_curvatures", "compute_bounds",
]

logger = logging.getLogger(__name__)

EMPTY_EXTENT = 100.0
DEFAULT_EDGE_COLOR = "currentColor"


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    width: float
    height: float

    @property
    def view_box(self) -> str:
        return " ".join(fmt_number(v) for v in (self.min_x, self.min_y, self.width, self.height))


class _Extent:
    """Running min/max accumulator."""

    def __init__(self):
        self.min_x = self.min_y = math.inf
        self.max_x = self.max_y = -math.inf

    @property
    def empty(self) -> bool:
        return self.min_x == math.inf

    def add_box(self, x0: float, y0: float, x1: float, y1: float) -> None:
        self.min_x = min(self.min_x, x0)
        self.min_y = min(self.min_y, y0)
        self.max_x = max(self.max_x, x1)
        self.max_y = max(self.max_y, y1)

    def add_circle(self, cx: float, cy: float, r: float) -> None:
        self.add_box(cx - r, cy - r, cx + r, cy + r)

    def bounds(self, padding: float) -> Bounds:
        if self.empty:
            return Bounds(0.0, 0.0, EMPTY_EXTENT, EMPTY_EXTENT)
        return Bounds(
            self.min_x - padding,
            self.min_y - padding,
            self.max_x - self.min_x + 2 * padding,
            self.max_y - self.min_y + 2 * padding,
        )


@dataclass
class EdgePlan:
    """An edge that survived clipping, with its position in graph.edges."""
    index: int
    edge: Edge
    curve: EdgeCurve


def assign_curvatures(edges: Iterable[Edge]) -> Dict[Tuple[str, str], List[Edge]]:
    """Group edges by ordered (source, target) and set each edge's curvature multiplier."""
    groups: Dict[Tuple[str, str], List[Edge]] = {}
    for edge in edges:
        groups.setdefault((edge.source_id, edge.target_id), []).append(edge)
    for group in groups.values():
        for i, edge in enumerate(group):
            edge.curvature = geometry.curvature_multiplier(i, len(group))
    return groups


def _placed_nodes(graph: GraphModel) -> Dict[str, Node]:
    """Copies of the nodes with unset coordinates pinned to the origin."""
    placed = {}
    for node_id, node in graph.nodes.items():
        placed[node_id] = Node(
            node.id, label=node.label, size=node.size, color=node.color, icon=node.icon,
            x=node.x if node.x is not None else 0.0,
            y=node.y if node.y is not None else 0.0,
        )
    return placed


def _plan_edges(graph: GraphModel, nodes: Dict[str, Node], options: RenderOptions) -> List[EdgePlan]:
    assign_curvatures(graph.edges)
    plans = []
    for index, edge in enumerate(graph.edges):
        source, target = nodes.get(edge.source_id), nodes.get(edge.target_id)
        if source is None or target is None:
            continue
        kind = edge.kind.as_curved() if options.curved_edges else edge.kind
        curve = geometry.edge_curve(source, target, kind.is_curved or edge.curvature != 0, edge.curvature)
        if curve is None:
            logger.debug("Skipping edge %s: endpoint circles overlap", edge.id)
            continue
        plans.append(EdgePlan(index, edge, curve))
    return plans


def _base_extent(nodes: Dict[str, Node], plans: List[EdgePlan]) -> _Extent:
    extent = _Extent()
    for node in nodes.values():
        extent.add_circle(node.x, node.y, node.size)
        if node.label:
            font_size = node_font_size(node)
            label_x = node.x + node.size + NODE_LABEL_GAP
            extent.add_box(
                label_x,
                node.y - font_size / 2,
                label_x + estimate_text_width(node.label, font_size),
                node.y + font_size / 2,
            )
    for plan in plans:
        half = plan.edge.size / 2
        points = [plan.curve.start, plan.curve.end]
        if plan.curve.curved:
            # Apex of the curve between the clipped endpoints.
            points.append(geometry.quad_point(*plan.curve, 0.5))
        for x, y in points:
            extent.add_circle(x, y, half)
    return extent


def compute_bounds(graph: GraphModel, options: Optional[RenderOptions] = None) -> Bounds:
    """Bounding box of nodes, node labels and edge curves, plus padding."""
    options = options or RenderOptions()
    nodes = _placed_nodes(graph)
    return _base_extent(nodes, _plan_edges(graph, nodes, options)).bounds(options.padding)


def _edge_layer(
    plans: List[EdgePlan], options: RenderOptions, scale: float
) -> Tuple[List[str], List[EdgeLabel]]:
    paths = []
    labels = []
    for plan in plans:
        edge = plan.edge
        kind = edge.kind.as_curved() if options.curved_edges else edge.kind
        path_data = geometry.curve_path(plan.curve, kind, edge.size)
        if not path_data:
            continue
        if options.optimize:
            path_data = geometry.optimize_path(path_data)
        color = edge.color or options.edge_color or DEFAULT_EDGE_COLOR
        paths.append(f'<path d="{path_data}" fill="{escape_xml(color)}" />')

        label = edge_label(
            plan.curve, edge.label, edge.size, color, options, scale, path_id=f"edge-label-path-{plan.index}"
        )
        if label is not None:
            labels.append(label)
    return paths, labels


def _node_layer(nodes: Dict[str, Node], symbols: Dict[str, IconSymbol], options: RenderOptions, scale: float) -> str:
    parts = []
    if symbols:
        parts.append("<defs>\n" + "\n".join(s.content for s in symbols.values()) + "\n</defs>")
    for node_id, node in nodes.items():
        parts.append(
            f'<g class="node" data-node-id="{escape_xml(node_id)}">'
            f'<circle cx="{fmt_number(node.x)}" cy="{fmt_number(node.y)}" r="{fmt_number(node.size)}" '
            f'fill="{escape_xml(node.color or "#cccccc")}" stroke="none"/>'
            f"{icon_markup(node, symbols.get(node.icon) if node.icon else None)}"
            f"{node_label(node, options, scale)}"
            "</g>"
        )
    return "\n".join(parts)


NodeRenderer = Callable[[Node, str], str]
EdgeRenderer = Callable[[List[EdgePlan], RenderOptions, float], Tuple[List[str], List[EdgeLabel]]]


async def render(
    graph: GraphModel,
    options: Optional[RenderOptions] = None,
    client: Optional[httpx.AsyncClient] = None,
    node_renderer: Optional[NodeRenderer] = None,
    edge_renderer: Optional[EdgeRenderer] = None,
) -> str:
    """
    Render a positioned graph to a standalone SVG document.

    Nodes without coordinates are drawn at the origin. Icon URIs are loaded
    concurrently when ``options.embed_icons`` is set; ``client`` overrides
    the HTTP client used for remote icons.

    ``node_renderer(node, node_id)`` replaces the markup of each node (no
    icons are loaded then). ``edge_renderer(plans, options, scale)`` replaces
    the edge layer and returns the path elements and placed labels.
    """
    options = options or RenderOptions()
    edge_renderer = edge_renderer or _edge_layer
    nodes = _placed_nodes(graph)
    plans = _plan_edges(graph, nodes, options)

    extent = _base_extent(nodes, plans)
    base = extent.bounds(options.padding)
    scale = viewport_scale(base.width, base.height, options)

    paths, labels = edge_renderer(plans, options, scale)
    for label in labels:
        extent.add_circle(label.center[0], label.center[1], label.radius)
    bounds = extent.bounds(options.padding)

    if node_renderer is not None:
        node_markup = "\n".join(node_renderer(node, node_id) for node_id, node in nodes.items())
    else:
        symbols: Dict[str, IconSymbol] = {}
        if options.embed_icons:
            symbols = await load_symbols(
                (n.icon for n in nodes.values() if n.icon), client=client, timeout=options.fetch_timeout
            )
        node_markup = _node_layer(nodes, symbols, options, scale)

    width = options.width or bounds.width
    height = options.height or bounds.height
    label_defs = [label.defs for label in labels if label.defs]

    lines = [
        f'<svg width="{fmt_number(width)}" height="{fmt_number(height)}" viewBox="{bounds.view_box}" '
        'xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
        'style="font-family:Arial, sans-serif;">',
    ]
    if options.background and options.background != "transparent":
        lines.append(f'<rect x="{fmt_number(bounds.min_x)}" y="{fmt_number(bounds.min_y)}" '
                     f'width="{fmt_number(bounds.width)}" height="{fmt_number(bounds.height)}" '
                     f'fill="{escape_xml(options.background)}" />')
    lines.append('<g class="edges">')
    lines.extend(paths)
    lines.append("</g>")
    lines.append('<g class="labels">')
    if label_defs:
        lines.append("<defs>" + "\n".join(label_defs) + "</defs>")
    lines.extend(label.text for label in labels)
    lines.append("</g>")
    lines.append('<g class="nodes">')
    if node_markup:
        lines.append(node_markup)
    lines.append("</g>")
    lines.append("</svg>")
    return "\n".join(lines)


class SvgExporter:
    """Exports a GraphModel to SVG."""

    @staticmethod
    async def to_svg_async(
        graph: GraphModel,
        options: Optional[RenderOptions] = None,
        client: Optional[httpx.AsyncClient] = None,
        node_renderer: Optional[NodeRenderer] = None,
        edge_renderer: Optional[EdgeRenderer] = None,
    ) -> str:
        return await render(
            graph, options, client=client, node_renderer=node_renderer, edge_renderer=edge_renderer
        )

    @staticmethod
    def to_svg(
        graph: GraphModel,
        options: Optional[RenderOptions] = None,
        node_renderer: Optional[NodeRenderer] = None,
        edge_renderer: Optional[EdgeRenderer] = None,
    ) -> str:
        """
        Convert a positioned graph to an SVG string.

        Runs its own event loop; inside async code use ``to_svg_async``.
        """
        return asyncio.run(render(graph, options, node_renderer=node_renderer, edge_renderer=edge_renderer))
