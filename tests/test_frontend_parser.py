"""Tests for the diagram text parser."""

from pathlib import Path

import pytest

from graphdiagram.core.ir import EdgeKind
from graphdiagram.core.serialization import JsonSerializer
from graphdiagram.frontend import GraphParser, parse, parse_line, tokenize, icon_for_kind
from graphdiagram.frontend.parser import TitleDecl, NodeDecl, EdgeDecl, match_edge, match_node


class TestParseDocument:
    def test_demo_document(self):
        graph = parse("graphDiagram Demo\nperson Alice 25 #lightgreen\nnode Bob 12 #lightblue\nAlice->Bob: Hi")

        assert graph.title == "Demo"
        assert list(graph.nodes) == ["Alice", "Bob"]

        alice = graph.nodes["Alice"]
        assert alice.size == 25
        assert alice.color == "#90ee90"
        assert Path(alice.icon).name == "person.svg"

        bob = graph.nodes["Bob"]
        assert bob.size == 12
        assert bob.color == "#add8e6"
        assert bob.icon is None

        assert len(graph.edges) == 1
        edge = graph.edges[0]
        assert (edge.source_id, edge.target_id) == ("Alice", "Bob")
        assert edge.kind is EdgeKind.ARROW
        assert edge.label == "Hi"
        assert edge.size == 1

    def test_undeclared_endpoints_are_auto_created(self):
        graph = parse("A--B")

        assert graph.title == "Graph Diagram"
        assert set(graph.nodes) == {"A", "B"}
        for node in graph.nodes.values():
            assert node.size == 10
            assert node.color == "#666"
            assert node.icon is None
        assert len(graph.edges) == 1
        assert graph.edges[0].kind is EdgeKind.LINE
        assert graph.edges[0].size == 1

    def test_three_amigos(self, amigos_text):
        graph = parse(amigos_text)

        assert graph.title == "The three amigos"
        assert list(graph.nodes) == ["Alice", "Bob", "Charlie"]
        weighted = graph.edges[1]
        assert (weighted.source_id, weighted.target_id) == ("Alice", "Charlie")
        assert weighted.size == 5
        assert weighted.label == "How are you?"
        assert graph.edges[2].kind is EdgeKind.LINE

    def test_parse_is_deterministic(self, amigos_text):
        first = JsonSerializer.to_dict(parse(amigos_text))
        second = JsonSerializer.to_dict(parse(amigos_text))
        assert first == second

    def test_calls_do_not_share_state(self):
        parser = GraphParser()
        parser.parse("graphDiagram One\nA->B")
        graph = parser.parse("C--D")

        assert graph.title == "Graph Diagram"
        assert set(graph.nodes) == {"C", "D"}
        assert len(graph.edges) == 1

    def test_comments_blank_and_garbage_lines_are_skipped(self):
        graph = parse("""
            // a comment
            graphDiagram Title

            this line means nothing
            A->B
        """)

        assert graph.title == "Title"
        assert set(graph.nodes) == {"A", "B"}
        assert len(graph.edges) == 1

    def test_empty_text(self):
        graph = parse("")
        assert graph.nodes == {}
        assert graph.edges == []
        assert parse(None).nodes == {}

    def test_bare_title_keyword_keeps_default(self):
        assert parse("graphDiagram").title == "Graph Diagram"

    def test_node_declared_after_use_keeps_slot(self):
        graph = parse("A->B\nperson A 30")

        assert list(graph.nodes) == ["A", "B"]
        assert graph.nodes["A"].size == 30

    def test_repeated_edges_get_suffixed_ids(self):
        graph = parse("A->B\nA->B\nA->B")
        assert [e.id for e in graph.edges] == ["A-B", "A-B#2", "A-B#3"]


class TestEdgeSyntax:
    @pytest.mark.parametrize("text, source, target, weight, kind", [
        ("A->B", "A", "B", 1, EdgeKind.ARROW),
        ("A-4->B", "A", "B", 4, EdgeKind.ARROW),
        ("A-->B", "A", "B", 1, EdgeKind.ARROW),
        ("A--3->B", "A", "B", 3, EdgeKind.ARROW),
        ("A<-B", "B", "A", 1, EdgeKind.ARROW),
        ("A<-3-B", "B", "A", 3, EdgeKind.ARROW),
        ("A--B", "A", "B", 1, EdgeKind.LINE),
        ("A-2--B", "A", "B", 2, EdgeKind.LINE),
        ("A-7-B", "A", "B", 7, EdgeKind.LINE),
        ("A<->B", "A", "B", 1, EdgeKind.DOUBLE_ARROW),
        ("A<-6->B", "A", "B", 6, EdgeKind.DOUBLE_ARROW),
        ("  Alice  ->  Bob  ", "Alice", "Bob", 1, EdgeKind.ARROW),
    ])
    def test_forms(self, text, source, target, weight, kind):
        decl = parse_line(text.strip())

        assert isinstance(decl, EdgeDecl)
        assert (decl.source, decl.target, decl.weight, decl.kind) == (source, target, weight, kind)

    def test_reverse_edge_mirrors_forward_edge(self):
        assert parse_line("A<-3-B") == parse_line("B-3->A")

    def test_label_keeps_later_colons(self):
        decl = parse_line("A->B: at 10:30")
        assert decl.label == "at 10:30"

    def test_empty_label_is_none(self):
        assert parse_line("A->B:").label is None

    def test_non_numeric_weight_stays_in_source(self):
        decl = parse_line("A-x->B")
        assert (decl.source, decl.target, decl.weight) == ("A-x", "B", 1)

    @pytest.mark.parametrize("text", ["->B", "A->", "--", "A<-"])
    def test_empty_endpoint_drops_edge(self, text):
        assert match_edge(text, tokenize(text)) is None
        assert parse(text).edges == []

    def test_line_without_marker_is_not_an_edge(self):
        assert parse_line("just words") is None


class TestNodeSyntax:
    def test_size_and_color_in_any_order(self):
        decl = parse_line("tag T #ff0000 20")
        assert decl == NodeDecl(kind="tag", node_id="T", size=20, color="#ff0000", icon=icon_for_kind("tag"))

    def test_defaults(self):
        decl = parse_line("node N")
        assert (decl.size, decl.color, decl.icon) == (10, "#666", None)

    def test_keywords_and_named_colors_are_case_insensitive(self):
        decl = parse_line("PERSON P 5 #LightBlue")
        assert decl.kind == "person"
        assert decl.color == "#add8e6"
        assert decl.icon is not None

    def test_unknown_named_color_passes_through(self):
        assert parse_line("node N #123456").color == "#123456"

    def test_non_positive_size_is_ignored(self):
        assert parse_line("node N 0").size == 10
        assert parse_line("node N -4 7").size == 7

    def test_keyword_alone_is_not_a_node(self):
        tokens = tokenize("person")
        assert match_node("person", tokens) is None

    def test_title_rule(self):
        assert parse_line("graphDiagram My Graph") == TitleDecl("My Graph")


class TestIcons:
    def test_plain_node_has_no_icon(self):
        assert icon_for_kind("node") is None
        assert icon_for_kind("unknown") is None

    def test_bundled_icons_exist(self):
        for kind in ("person", "group", "tag", "message", "location", "document",
                     "company", "concept", "book", "education"):
            path = Path(icon_for_kind(kind))
            assert path.name == f"{kind}.svg"
            assert path.is_file()
