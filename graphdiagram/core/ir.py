import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

DEFAULT_TITLE = "Graph Diagram"
DEFAULT_NODE_SIZE = 10
DEFAULT_NODE_COLOR = "#666"


class EdgeKind(str, Enum):
    """Visual kind of an edge. Every straight kind has a curved variant."""
    LINE = "line"
    ARROW = "arrow"
    DOUBLE_ARROW = "doubleArrow"
    CURVED = "curved"
    CURVED_ARROW = "curvedArrow"
    CURVED_DOUBLE_ARROW = "curvedDoubleArrow"

    @property
    def is_curved(self) -> bool:
        return self in (EdgeKind.CURVED, EdgeKind.CURVED_ARROW, EdgeKind.CURVED_DOUBLE_ARROW)

    @property
    def end_arrow(self) -> bool:
        return self not in (EdgeKind.LINE, EdgeKind.CURVED)

    @property
    def start_arrow(self) -> bool:
        return self in (EdgeKind.DOUBLE_ARROW, EdgeKind.CURVED_DOUBLE_ARROW)

    def as_curved(self) -> "EdgeKind":
        return _CURVED_VARIANTS.get(self, self)


_CURVED_VARIANTS = {
    EdgeKind.LINE: EdgeKind.CURVED,
    EdgeKind.ARROW: EdgeKind.CURVED_ARROW,
    EdgeKind.DOUBLE_ARROW: EdgeKind.CURVED_DOUBLE_ARROW,
}


class Node:
    """A circle in the diagram. Position stays unset until a layout runs."""
    def __init__(
        self,
        node_id: str,
        label: Optional[str] = None,
        size: float = DEFAULT_NODE_SIZE,
        color: str = DEFAULT_NODE_COLOR,
        icon: Optional[str] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
    ):
        self.id = node_id
        self.label = label if label is not None else node_id
        self.size = size
        self.color = color
        self.icon = icon
        self.x = x
        self.y = y

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return (self.id, self.label, self.size, self.color, self.icon, self.x, self.y) == (
            other.id, other.label, other.size, other.color, other.icon, other.x, other.y
        )

    def __repr__(self):
        return f"<Node id={self.id} size={self.size} color='{self.color}'>"


class Edge:
    """Represents a connection between two nodes."""
    def __init__(
        self,
        source_id: str,
        target_id: str,
        label: Optional[str] = None,
        size: float = 1,
        kind: EdgeKind = EdgeKind.LINE,
        edge_id: Optional[str] = None,
        color: Optional[str] = None,
    ):
        self.id = edge_id if edge_id else f"{source_id}-{target_id}"
        self.source_id = source_id
        self.target_id = target_id
        self.label = label
        self.size = size  # thickness
        self.kind = EdgeKind(kind)
        self.color = color
        # Multiplier fanning out parallel edges; set by the renderer.
        self.curvature = 0.0

    @property
    def directed(self) -> bool:
        return self.kind.end_arrow

    def __eq__(self, other):
        if not isinstance(other, Edge):
            return NotImplemented
        return (self.id, self.source_id, self.target_id, self.label, self.size, self.kind, self.color) == (
            other.id, other.source_id, other.target_id, other.label, other.size, other.kind, other.color
        )

    def __repr__(self):
        return f"<Edge {self.source_id} -> {self.target_id} kind={self.kind.value} label='{self.label}'>"


class GraphModel:
    """Represents the entire diagram: title, nodes in insertion order, edges."""
    def __init__(self, title: str = DEFAULT_TITLE):
        self.title = title
        self.nodes: Dict[str, Node] = {}
        self.edges: List[Edge] = []

    def add_node(self, node: Node) -> Node:
        # Re-declaring an id replaces the record but keeps its original slot.
        self.nodes[node.id] = node
        return node

    def add_edge(self, edge: Edge) -> Edge:
        if edge.source_id not in self.nodes:
            raise ValueError(f"Source node {edge.source_id} does not exist.")
        if edge.target_id not in self.nodes:
            raise ValueError(f"Target node {edge.target_id} does not exist.")
        taken = {e.id for e in self.edges}
        if edge.id in taken:
            base = f"{edge.source_id}-{edge.target_id}"
            n = 2
            while f"{base}#{n}" in taken:
                n += 1
            edge.id = f"{base}#{n}"
        self.edges.append(edge)
        return edge

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    def edges_between(self, source_id: str, target_id: str) -> List[Edge]:
        """Edges sharing the ordered (source, target) pair, in declaration order."""
        return [e for e in self.edges if e.source_id == source_id and e.target_id == target_id]

    def __repr__(self):
        return f"<GraphModel title='{self.title}' nodes={len(self.nodes)} edges={len(self.edges)}>"


@dataclass(frozen=True)
class RenderOptions:
    """Knobs for the SVG renderer. A width or height of 0/None uses the computed bounds."""
    width: Optional[float] = 800
    height: Optional[float] = 600
    padding: float = 20
    background: str = "transparent"
    embed_icons: bool = True
    optimize: bool = True
    curved_edges: bool = False
    edge_color: Optional[str] = None
    label_min_font_size: float = 4
    label_max_font_size: float = 14
    label_fill_ratio: float = 0.9
    label_hide_below: float = 3.0
    reference_size: float = 800
    fetch_timeout: float = 10.0

    def replace(self, **changes) -> "RenderOptions":
        return dataclasses.replace(self, **changes)
