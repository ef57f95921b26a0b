"""
JSON serialization for GraphModel objects.

The serialized format round-trips through from_dict() and doubles as the
payload handed to an interactive canvas: node entries carry their laid-out
coordinates (or null before a layout has run).
"""

import json
from typing import Dict, Any

from graphdiagram.core.ir import GraphModel, Node, Edge, EdgeKind, DEFAULT_TITLE


class JsonSerializer:
    """Serializes and deserializes GraphModel objects to/from JSON."""

    @staticmethod
    def to_dict(graph: GraphModel) -> Dict[str, Any]:
        nodes_data = []
        for node in graph.nodes.values():
            nodes_data.append({
                "id": node.id,
                "label": node.label,
                "size": node.size,
                "color": node.color,
                "icon": node.icon,
                "x": node.x,
                "y": node.y,
            })

        edges_data = []
        for edge in graph.edges:
            edges_data.append({
                "id": edge.id,
                "source": edge.source_id,
                "target": edge.target_id,
                "label": edge.label,
                "size": edge.size,
                "type": edge.kind.value,
                "color": edge.color,
            })

        return {
            "title": graph.title,
            "nodes": nodes_data,
            "edges": edges_data,
        }

    @staticmethod
    def to_json(graph: GraphModel, indent: int = 2) -> str:
        return json.dumps(JsonSerializer.to_dict(graph), indent=indent)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> GraphModel:
        graph = GraphModel(title=data.get("title") or DEFAULT_TITLE)

        for node_data in data.get("nodes", []):
            graph.add_node(Node(
                node_id=node_data["id"],
                label=node_data.get("label"),
                size=node_data.get("size", 10),
                color=node_data.get("color", "#666"),
                icon=node_data.get("icon"),
                x=node_data.get("x"),
                y=node_data.get("y"),
            ))

        for edge_data in data.get("edges", []):
            graph.add_edge(Edge(
                source_id=edge_data["source"],
                target_id=edge_data["target"],
                label=edge_data.get("label"),
                size=edge_data.get("size", 1),
                kind=EdgeKind(edge_data.get("type", EdgeKind.LINE.value)),
                edge_id=edge_data.get("id"),
                color=edge_data.get("color"),
            ))

        return graph

    @staticmethod
    def from_json(json_str: str) -> GraphModel:
        data = json.loads(json_str)
        return JsonSerializer.from_dict(data)
