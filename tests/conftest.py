import random

import pytest

from graphdiagram.core.ir import GraphModel, Node, Edge, EdgeKind

AMIGOS = """
graphDiagram The three amigos
person Alice 25 #lightgreen
node Bob 12 #lightblue

Alice->Bob: Hello Bob!
Alice-5->Charlie: How are you?
Charlie--Bob: Good, thanks!
"""


@pytest.fixture
def amigos_text():
    return AMIGOS


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def positioned_graph():
    """Two spaced-out nodes joined by an arrow, plus a lone third node."""
    graph = GraphModel("Positioned")
    graph.add_node(Node("A", size=10, x=0.0, y=0.0))
    graph.add_node(Node("B", size=10, x=200.0, y=0.0))
    graph.add_node(Node("C", size=10, x=100.0, y=150.0))
    graph.add_edge(Edge("A", "B", label="hello", size=2, kind=EdgeKind.ARROW))
    return graph
