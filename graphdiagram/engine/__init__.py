"""Runtime drivers: the parse/layout/render pipeline and debounced recompute."""

from .debounce import Debouncer
from .pipeline import DiagramPipeline, LiveDiagram, RenderResult, GraphCanvas, sync_canvas

__all__ = [
    "Debouncer",
    "DiagramPipeline",
    "LiveDiagram",
    "RenderResult",
    "GraphCanvas",
    "sync_canvas",
]
