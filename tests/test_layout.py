"""Tests for the layout strategies."""

import math
import random

import pytest

from graphdiagram.core.ir import GraphModel, Node, Edge
from graphdiagram.layout import (
    STRATEGIES, CircularLayout, GraphvizForceLayout, LayoutUnavailableError, RandomLayout,
    SimpleForceLayout, apply_layout, get_strategy, infer_settings,
)


def make_graph(count: int, ring: bool = True) -> GraphModel:
    graph = GraphModel("Layout")
    for i in range(count):
        graph.add_node(Node(f"n{i}"))
    if ring and count > 1:
        for i in range(count):
            graph.add_edge(Edge(f"n{i}", f"n{(i + 1) % count}"))
    return graph


def positions(graph: GraphModel):
    return {node.id: (node.x, node.y) for node in graph.nodes.values()}


class TestCircularLayout:
    def test_equal_radius_and_spacing(self):
        graph = make_graph(6)
        apply_layout(graph, "circular")

        radius = CircularLayout.radius_for(6)
        angles = []
        for node in graph.nodes.values():
            assert math.hypot(node.x, node.y) == pytest.approx(radius)
            angles.append(math.atan2(node.y, node.x) % (2 * math.pi))

        step = 2 * math.pi / 6
        for i, angle in enumerate(angles):
            assert angle == pytest.approx(i * step, abs=1e-9)

    def test_radius_grows_with_node_count(self):
        assert CircularLayout.radius_for(1) == 80
        assert CircularLayout.radius_for(4) == 80
        assert CircularLayout.radius_for(10) == 200

    def test_insertion_order(self):
        graph = make_graph(3, ring=False)
        apply_layout(graph, CircularLayout())
        first = graph.nodes["n0"]
        assert (first.x, first.y) == pytest.approx((80, 0))


class TestRandomLayout:
    def test_two_runs_differ(self):
        graph = make_graph(5)
        apply_layout(graph, "random")
        first = positions(graph)
        apply_layout(graph, "random")
        assert positions(graph) != first

    def test_range(self, rng):
        graph = make_graph(50, ring=False)
        RandomLayout(rng=rng).apply(graph)
        for x, y in positions(graph).values():
            assert -200 <= x < 200
            assert -200 <= y < 200

    def test_seeded_runs_repeat(self):
        a, b = make_graph(5), make_graph(5)
        apply_layout(a, "random", rng=random.Random(7))
        apply_layout(b, "random", rng=random.Random(7))
        assert positions(a) == positions(b)


class TestSimpleForceLayout:
    def test_positions_every_node(self, rng):
        graph = make_graph(8)
        SimpleForceLayout(rng=rng).apply(graph)
        for node in graph.nodes.values():
            assert node.has_position
            assert math.isfinite(node.x) and math.isfinite(node.y)

    def test_unconnected_pair_is_pushed_apart(self, rng):
        graph = make_graph(2, ring=False)
        graph.nodes["n0"].x, graph.nodes["n0"].y = 0.0, 0.0
        graph.nodes["n1"].x, graph.nodes["n1"].y = 10.0, 0.0

        SimpleForceLayout(rng=rng, iterations=10).apply(graph)

        a, b = graph.nodes["n0"], graph.nodes["n1"]
        assert math.hypot(b.x - a.x, b.y - a.y) > 10.0

    def test_coincident_nodes_separate(self, rng):
        graph = make_graph(2, ring=False)
        for node in graph.nodes.values():
            node.x, node.y = 5.0, 5.0

        SimpleForceLayout(rng=rng, iterations=5).apply(graph)

        a, b = graph.nodes["n0"], graph.nodes["n1"]
        assert (a.x, a.y) != (b.x, b.y)

    def test_self_loop_is_ignored(self, rng):
        graph = make_graph(1, ring=False)
        graph.add_edge(Edge("n0", "n0"))
        SimpleForceLayout(rng=rng).apply(graph)
        assert graph.nodes["n0"].has_position


class TestDelegatedLayout:
    def test_runner_positions_are_applied(self, rng):
        graph = make_graph(3)
        calls = []

        def runner(g, settings):
            calls.append(settings)
            return {"n0": (1.0, 2.0), "n1": (3.0, 4.0), "n2": (5.0, 6.0), "ghost": (0.0, 0.0)}

        GraphvizForceLayout(rng=rng, runner=runner).apply(graph)

        assert positions(graph) == {"n0": (1.0, 2.0), "n1": (3.0, 4.0), "n2": (5.0, 6.0)}
        assert calls[0]["engine"] == "fdp"
        assert calls[0]["maxiter"] == "50"

    def test_runner_sees_seeded_positions(self, rng):
        graph = make_graph(3)
        seen = {}

        def runner(g, settings):
            seen.update(positions(g))
            return {}

        GraphvizForceLayout(rng=rng, runner=runner).apply(graph)

        for x, y in seen.values():
            assert -100 <= x < 100
            assert -100 <= y < 100

    def test_unavailable_collaborator_falls_back(self, rng, caplog):
        graph = make_graph(4)

        def runner(g, settings):
            raise LayoutUnavailableError("no graphviz here")

        GraphvizForceLayout(rng=rng, runner=runner).apply(graph)

        assert all(node.has_position for node in graph.nodes.values())
        assert "Falling back" in caplog.text

    def test_infer_settings_scales_with_graph(self):
        small = infer_settings(make_graph(10, ring=False))
        large = infer_settings(make_graph(600, ring=False), iterations=20)

        assert small["engine"] == "fdp"
        assert small["K"] == "1.0"
        assert large["engine"] == "sfdp"
        assert large["K"] == "0.3"
        assert large["maxiter"] == "20"


class TestApplyLayout:
    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    def test_empty_graph_is_a_noop(self, name):
        graph = GraphModel()
        apply_layout(graph, name)
        assert graph.nodes == {}

    def test_unknown_name_falls_back_to_simple_force(self, caplog):
        strategy = get_strategy("spiral")
        assert isinstance(strategy, SimpleForceLayout)
        assert "Unknown layout" in caplog.text

    def test_alias(self):
        assert isinstance(get_strategy("graphviz"), GraphvizForceLayout)
        assert get_strategy("force-atlas2").name == "force-atlas2"
