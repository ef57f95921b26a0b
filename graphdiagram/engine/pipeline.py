"""Parse, lay out and render in one call, plus the debounced live variant."""

import inspect
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Union

import httpx

from graphdiagram.backend.svg import render
from graphdiagram.core.ir import GraphModel, RenderOptions
from graphdiagram.engine.debounce import Debouncer
from graphdiagram.frontend.parser import parse
from graphdiagram.layout import DEFAULT_LAYOUT, LayoutStrategy, apply_layout

logger = logging.getLogger(__name__)

CANVAS_EDGE_COLOR = "#999"
CANVAS_MIN_NODE_SIZE = 5
CANVAS_MIN_EDGE_SIZE = 1


@dataclass
class RenderResult:
    graph: GraphModel
    svg: str


class DiagramPipeline:
    """text -> GraphModel -> positioned GraphModel -> SVG."""

    def __init__(
        self,
        layout: Union[str, LayoutStrategy] = DEFAULT_LAYOUT,
        options: Optional[RenderOptions] = None,
        rng: Optional[random.Random] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.layout = layout
        self.options = options or RenderOptions()
        self.rng = rng
        self.client = client

    def build(self, text: str) -> GraphModel:
        """Parse and lay out, without rendering."""
        graph = parse(text)
        apply_layout(graph, self.layout, rng=self.rng)
        return graph

    async def run(self, text: str) -> RenderResult:
        graph = self.build(text)
        svg = await render(graph, self.options, client=self.client)
        return RenderResult(graph, svg)


class LiveDiagram:
    """
    Debounced recompute driven by text-change notifications.

    notify() may be called on every edit; only the last notification inside
    the quiet window runs the pipeline, and its result goes to ``on_render``
    (plain function or coroutine function).
    """

    def __init__(
        self,
        pipeline: DiagramPipeline,
        on_render: Callable[[RenderResult], Any],
        delay: float = 3.0,
        loop=None,
    ):
        self.pipeline = pipeline
        self.on_render = on_render
        self.last_result: Optional[RenderResult] = None
        self._debouncer = Debouncer(self._recompute, delay, loop=loop)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    @property
    def task(self):
        """The most recently started recompute, if any."""
        return self._debouncer.task

    def notify(self, text: str) -> None:
        self._debouncer.trigger(text)

    def cancel(self) -> None:
        self._debouncer.cancel()

    async def _recompute(self, text: str) -> None:
        try:
            result = await self.pipeline.run(text)
            self.last_result = result
            outcome = self.on_render(result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception("Recomputing diagram failed")


class GraphCanvas(Protocol):
    """Mutation API of an interactive graph canvas."""

    def clear(self) -> None: ...

    def add_node(self, node_id: str, **attributes: Any) -> None: ...

    def add_edge(self, source_id: str, target_id: str, **attributes: Any) -> None: ...

    def refresh(self) -> None: ...


def sync_canvas(canvas: GraphCanvas, graph: GraphModel, curved: bool = True) -> None:
    """Replace the canvas contents with the graph and redraw."""
    canvas.clear()
    for node in graph.nodes.values():
        canvas.add_node(
            node.id,
            label=node.label,
            size=max(CANVAS_MIN_NODE_SIZE, node.size),
            color=node.color,
            x=node.x,
            y=node.y,
            image=node.icon,
        )
    for edge in graph.edges:
        if not (graph.has_node(edge.source_id) and graph.has_node(edge.target_id)):
            continue
        kind = edge.kind.as_curved() if curved else edge.kind
        canvas.add_edge(
            edge.source_id,
            edge.target_id,
            label=edge.label or "",
            size=max(CANVAS_MIN_EDGE_SIZE, edge.size),
            color=edge.color or CANVAS_EDGE_COLOR,
            type=kind.value,
        )
    canvas.refresh()
