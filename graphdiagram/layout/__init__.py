"""
Layout engine: assigns 2-D coordinates to the nodes of a GraphModel.

Strategies, selectable by name:
- random: uniform random coordinates
- circular: evenly spaced on a circle
- simple-force: local spring-electric simulation
- force-atlas2 (alias graphviz): delegated to Graphviz, falling back to simple-force
"""

import logging
import random
from typing import Dict, Optional, Type, Union

from graphdiagram.core.ir import GraphModel
from .strategies import LayoutStrategy, RandomLayout, CircularLayout, SimpleForceLayout
from .delegated import GraphvizForceLayout, LayoutUnavailableError, infer_settings, run_graphviz

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "simple-force"

STRATEGIES: Dict[str, Type[LayoutStrategy]] = {
    "random": RandomLayout,
    "circular": CircularLayout,
    "simple-force": SimpleForceLayout,
    "force-atlas2": GraphvizForceLayout,
    "graphviz": GraphvizForceLayout,
}


def get_strategy(name: str, rng: Optional[random.Random] = None) -> LayoutStrategy:
    """Instantiate a strategy by name; unknown names fall back to simple-force."""
    cls = STRATEGIES.get(name)
    if cls is None:
        logger.warning("Unknown layout %r, using %s", name, DEFAULT_LAYOUT)
        cls = STRATEGIES[DEFAULT_LAYOUT]
    return cls(rng=rng)


def apply_layout(
    graph: GraphModel,
    strategy: Union[str, LayoutStrategy] = DEFAULT_LAYOUT,
    rng: Optional[random.Random] = None,
) -> None:
    """Mutate node positions in place. An empty graph is left untouched."""
    if isinstance(strategy, str):
        strategy = get_strategy(strategy, rng=rng)
    if not graph.nodes:
        return
    logger.debug("Applying %s layout to %d nodes", strategy.name, len(graph.nodes))
    strategy.apply(graph)


__all__ = [
    "LayoutStrategy",
    "RandomLayout",
    "CircularLayout",
    "SimpleForceLayout",
    "GraphvizForceLayout",
    "LayoutUnavailableError",
    "STRATEGIES",
    "DEFAULT_LAYOUT",
    "get_strategy",
    "apply_layout",
    "infer_settings",
    "run_graphviz",
]
