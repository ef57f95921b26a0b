import re
from typing import Union

import graphviz

from graphdiagram.core.ir import GraphModel, Node

POINTS_PER_INCH = 72.0

_SHORT_HEX = re.compile(r"^#([0-9a-fA-F])([0-9a-fA-F])([0-9a-fA-F])$")


class GraphvizExporter:
    """Exports a GraphModel to a Graphviz graph or DOT source."""

    @staticmethod
    def _color(color: str) -> str:
        """Graphviz only understands #rrggbb, so expand #rgb shorthand."""
        m = _SHORT_HEX.match(color or "")
        if m:
            return "#" + "".join(c * 2 for c in m.groups())
        return color

    @staticmethod
    def _node_attrs(node: Node) -> dict:
        diameter = 2 * node.size / POINTS_PER_INCH
        attrs = {
            "label": node.label,
            "shape": "circle",
            "style": "filled",
            "fillcolor": GraphvizExporter._color(node.color),
            "width": f"{diameter:.4f}",
            "height": f"{diameter:.4f}",
            "fixedsize": "true",
        }
        if node.has_position:
            attrs["pos"] = f"{node.x:.4f},{-node.y:.4f}"
        return attrs

    @staticmethod
    def to_graph(graph: GraphModel) -> Union[graphviz.Graph, graphviz.Digraph]:
        """
        Converts a GraphModel to a graphviz object.

        A Digraph is produced when any edge carries an arrowhead; undirected
        edges inside it are drawn with dir=none.
        """
        directed = any(e.kind.end_arrow for e in graph.edges)
        cls = graphviz.Digraph if directed else graphviz.Graph
        dot = cls(name=graph.title, comment=graph.title)

        for node in graph.nodes.values():
            dot.node(node.id, **GraphvizExporter._node_attrs(node))

        for edge in graph.edges:
            attrs = {"label": edge.label or "", "penwidth": str(edge.size)}
            if directed:
                if edge.kind.start_arrow:
                    attrs["dir"] = "both"
                elif not edge.kind.end_arrow:
                    attrs["dir"] = "none"
            dot.edge(edge.source_id, edge.target_id, **attrs)

        return dot

    @staticmethod
    def to_dot(graph: GraphModel) -> str:
        """Returns the DOT source string for the graph."""
        return GraphvizExporter.to_graph(graph).source
