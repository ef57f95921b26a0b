"""Backend exporters for graph diagrams."""

from graphdiagram.backend.graphviz import GraphvizExporter
from graphdiagram.backend.icons import IconFetchError
from graphdiagram.backend.svg import SvgExporter, render

__all__ = [
    "GraphvizExporter",
    "IconFetchError",
    "SvgExporter",
    "render",
]
