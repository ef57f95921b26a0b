"""Layout strategies that assign node coordinates in place."""

import logging
import math
import random
from typing import Dict, List, Optional, Tuple

from graphdiagram.core.ir import GraphModel, Node

logger = logging.getLogger(__name__)

SEED_SPREAD = 100.0
RANDOM_SPREAD = 200.0


class LayoutStrategy:
    """
    Base class for layouts. Subclasses mutate node positions in place and
    must treat an empty graph as a no-op.
    """
    name = ""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    def apply(self, graph: GraphModel) -> None:
        raise NotImplementedError

    def seed_positions(self, graph: GraphModel) -> None:
        """Give every unpositioned node a uniform random start in [-100, 100)."""
        for node in graph.nodes.values():
            if node.x is None:
                node.x = self.rng.random() * 2 * SEED_SPREAD - SEED_SPREAD
            if node.y is None:
                node.y = self.rng.random() * 2 * SEED_SPREAD - SEED_SPREAD

    def __repr__(self):
        return f"<{self.__class__.__name__} name='{self.name}'>"


class RandomLayout(LayoutStrategy):
    """Independent uniform coordinates in [-200, 200) on both axes."""
    name = "random"

    def apply(self, graph: GraphModel) -> None:
        for node in graph.nodes.values():
            node.x = (self.rng.random() - 0.5) * 2 * RANDOM_SPREAD
            node.y = (self.rng.random() - 0.5) * 2 * RANDOM_SPREAD


class CircularLayout(LayoutStrategy):
    """Nodes evenly spaced on a circle, in insertion order."""
    name = "circular"

    @staticmethod
    def radius_for(count: int) -> float:
        return max(80, count * 20)

    def apply(self, graph: GraphModel) -> None:
        count = len(graph.nodes)
        if count == 0:
            return
        step = 2 * math.pi / count
        radius = self.radius_for(count)
        for i, node in enumerate(graph.nodes.values()):
            angle = i * step
            node.x = math.cos(angle) * radius
            node.y = math.sin(angle) * radius


class SimpleForceLayout(LayoutStrategy):
    """
    Small spring-electric simulation.

    Each iteration pushes every pair of nodes apart with force
    ``repulsion / d**2``, pulls edge endpoints together with force
    ``attraction * d``, and moves each node by its net force times
    ``damping``. Cost is O(n^2) per iteration, fine up to a few hundred nodes.
    """
    name = "simple-force"

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        iterations: int = 50,
        repulsion: float = 1000.0,
        attraction: float = 0.01,
        damping: float = 0.85,
    ):
        super().__init__(rng)
        self.iterations = iterations
        self.repulsion = repulsion
        self.attraction = attraction
        self.damping = damping

    def _direction(self, a: Node, b: Node) -> Tuple[float, float, float]:
        dx = b.x - a.x
        dy = b.y - a.y
        distance = math.hypot(dx, dy)
        if distance == 0:
            # Coincident nodes: pick a random direction so they can separate.
            angle = self.rng.random() * 2 * math.pi
            return math.cos(angle), math.sin(angle), 1.0
        return dx / distance, dy / distance, max(distance, 1.0)

    def apply(self, graph: GraphModel) -> None:
        nodes: List[Node] = list(graph.nodes.values())
        if not nodes:
            return
        self.seed_positions(graph)

        edges = [
            (graph.nodes[e.source_id], graph.nodes[e.target_id])
            for e in graph.edges
            if e.source_id in graph.nodes and e.target_id in graph.nodes and e.source_id != e.target_id
        ]

        for _ in range(self.iterations):
            forces: Dict[str, List[float]] = {node.id: [0.0, 0.0] for node in nodes}

            for i in range(len(nodes)):
                a = nodes[i]
                for j in range(i + 1, len(nodes)):
                    b = nodes[j]
                    ux, uy, distance = self._direction(a, b)
                    push = self.repulsion / (distance * distance)
                    forces[a.id][0] -= ux * push
                    forces[a.id][1] -= uy * push
                    forces[b.id][0] += ux * push
                    forces[b.id][1] += uy * push

            for source, target in edges:
                ux, uy, distance = self._direction(source, target)
                pull = distance * self.attraction
                forces[source.id][0] += ux * pull
                forces[source.id][1] += uy * pull
                forces[target.id][0] -= ux * pull
                forces[target.id][1] -= uy * pull

            for node in nodes:
                fx, fy = forces[node.id]
                node.x += fx * self.damping
                node.y += fy * self.damping
