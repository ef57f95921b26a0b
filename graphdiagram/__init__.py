"""
graphdiagram - turn a small text language into positioned, self-contained SVG diagrams.

Main APIs:
- parse: diagram text -> GraphModel
- apply_layout: assign node coordinates (random, circular, simple-force, force-atlas2)
- render / SvgExporter: positioned GraphModel -> SVG markup

Backends:
- SvgExporter: standalone SVG with embedded icon symbols
- GraphvizExporter: Graphviz DOT format
- JsonSerializer: JSON graph payload
"""

from graphdiagram.core.ir import GraphModel, Node, Edge, EdgeKind, RenderOptions
from graphdiagram.core.serialization import JsonSerializer
from graphdiagram.frontend import GraphParser, parse
from graphdiagram.layout import apply_layout, get_strategy
from graphdiagram.backend import GraphvizExporter, SvgExporter, render
from graphdiagram.engine import DiagramPipeline, LiveDiagram, Debouncer, sync_canvas

__all__ = [
    # Core IR
    "GraphModel",
    "Node",
    "Edge",
    "EdgeKind",
    "RenderOptions",
    # Serialization
    "JsonSerializer",
    # Frontend
    "GraphParser",
    "parse",
    # Layout
    "apply_layout",
    "get_strategy",
    # Backends
    "GraphvizExporter",
    "SvgExporter",
    "render",
    # Engine
    "DiagramPipeline",
    "LiveDiagram",
    "Debouncer",
    "sync_canvas",
]
