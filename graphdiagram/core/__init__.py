"""Core data structures for graph diagrams."""

from .ir import Node, Edge, EdgeKind, GraphModel, RenderOptions
from .serialization import JsonSerializer

__all__ = [
    "Node",
    "Edge",
    "EdgeKind",
    "GraphModel",
    "RenderOptions",
    "JsonSerializer",
]
