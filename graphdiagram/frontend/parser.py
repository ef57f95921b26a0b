"""
Line-oriented parser for the graph diagram language.

Example:
    from graphdiagram.frontend.parser import parse

    graph = parse('''
        graphDiagram The three amigos
        person Alice 25 #lightgreen
        node Bob 12 #lightblue

        Alice->Bob: Hello Bob!
        Alice-5->Charlie: How are you?
        Charlie--Bob: Good, thanks!
    ''')

Every line is tokenized and offered to the grammar rules in order
(title, node, edge). A rule returns a typed declaration or None; the first
declaration wins and is folded into a per-call accumulator. Lines no rule
accepts are skipped.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union

from graphdiagram.core.ir import (
    GraphModel, Node, Edge, EdgeKind,
    DEFAULT_TITLE, DEFAULT_NODE_SIZE, DEFAULT_NODE_COLOR,
)
from graphdiagram.frontend.icons import NODE_KINDS, icon_for_kind

logger = logging.getLogger(__name__)

TITLE_KEYWORD = "graphDiagram"
COMMENT_MARKER = "//"

NAMED_COLORS = {
    "#red": "#ff0000",
    "#green": "#00ff00",
    "#blue": "#0000ff",
    "#yellow": "#ffff00",
    "#orange": "#ffa500",
    "#purple": "#800080",
    "#pink": "#ffc0cb",
    "#cyan": "#00ffff",
    "#magenta": "#ff00ff",
    "#lime": "#00ff00",
    "#brown": "#a52a2a",
    "#gray": "#808080",
    "#grey": "#808080",
    "#black": "#000000",
    "#white": "#ffffff",
    "#lightgreen": "#90ee90",
    "#lightblue": "#add8e6",
    "#lightred": "#ffcccb",
}

# (marker, weighted pattern, kind, swap endpoints). Checked in order; the
# plain split on the marker is used only when the pattern does not match.
# "A<-W-B" mirrors "B-W->A". A doubled dash before ">" is one arrow ("A-->B").
_EDGE_FORMS: Tuple[Tuple[str, "re.Pattern[str]", EdgeKind, bool], ...] = (
    ("<->", re.compile(r"^(?P<a>.+?)<-(?:(?P<w>\d+)-)?>(?P<b>.+)$"), EdgeKind.DOUBLE_ARROW, False),
    ("->", re.compile(r"^(?P<a>.+?)-?(?:-(?P<w>\d+))?->(?P<b>.+)$"), EdgeKind.ARROW, False),
    ("<-", re.compile(r"^(?P<a>.+?)<-(?:(?P<w>\d+)-)?(?P<b>.+)$"), EdgeKind.ARROW, True),
    ("--", re.compile(r"^(?P<a>.+?)(?:-(?P<w>\d+))?--(?P<b>.+)$"), EdgeKind.LINE, False),
)
# "A-3-B" carries no double-character marker of its own.
_WEIGHTED_LINE = re.compile(r"^(?P<a>.+?)-(?P<w>\d+)-(?P<b>.+)$")
_INTEGER = re.compile(r"^[+-]?\d+")


@dataclass(frozen=True)
class TitleDecl:
    title: Optional[str]


@dataclass(frozen=True)
class NodeDecl:
    kind: str
    node_id: str
    size: int = DEFAULT_NODE_SIZE
    color: str = DEFAULT_NODE_COLOR
    icon: Optional[str] = None


@dataclass(frozen=True)
class EdgeDecl:
    source: str
    target: str
    label: Optional[str] = None
    weight: int = 1
    kind: EdgeKind = EdgeKind.LINE


Declaration = Union[TitleDecl, NodeDecl, EdgeDecl]
Rule = Callable[[str, List[str]], Optional[Declaration]]


def tokenize(line: str) -> List[str]:
    """Split a trimmed line on runs of whitespace."""
    return line.split()


def iter_lines(text: str):
    """Yield trimmed lines, skipping blanks and // comments."""
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith(COMMENT_MARKER):
            continue
        yield line


def resolve_color(token: str) -> str:
    return NAMED_COLORS.get(token.lower(), token)


def match_title(line: str, tokens: List[str]) -> Optional[TitleDecl]:
    if not line.startswith(TITLE_KEYWORD):
        return None
    title = line[len(TITLE_KEYWORD):].strip()
    return TitleDecl(title or None)


def match_node(line: str, tokens: List[str]) -> Optional[NodeDecl]:
    if len(tokens) < 2 or tokens[0].lower() not in NODE_KINDS:
        return None

    kind = tokens[0].lower()
    size: Optional[int] = None
    color: Optional[str] = None
    for token in tokens[2:]:
        if color is None and token.startswith("#"):
            color = resolve_color(token)
        elif size is None:
            m = _INTEGER.match(token)
            if m and int(m.group(0)) > 0:
                size = int(m.group(0))

    return NodeDecl(
        kind=kind,
        node_id=tokens[1],
        size=size if size is not None else DEFAULT_NODE_SIZE,
        color=color if color is not None else DEFAULT_NODE_COLOR,
        icon=icon_for_kind(kind),
    )


def _split_edge(expr: str) -> Optional[Tuple[str, str, int, EdgeKind]]:
    """Resolve an edge expression into (source, target, weight, kind)."""
    for marker, pattern, kind, swap in _EDGE_FORMS:
        m = pattern.match(expr)
        if m:
            left, right = m.group("a"), m.group("b")
            weight = int(m.group("w")) if m.group("w") else 1
        elif marker in expr:
            left, _, right = expr.partition(marker)
            weight = 1
        else:
            continue
        if swap:
            left, right = right, left
        return left.strip(), right.strip(), max(weight, 1), kind

    m = _WEIGHTED_LINE.match(expr)
    if m:
        return m.group("a").strip(), m.group("b").strip(), max(int(m.group("w")), 1), EdgeKind.LINE
    return None


def match_edge(line: str, tokens: List[str]) -> Optional[EdgeDecl]:
    expr, _, label = line.partition(":")
    resolved = _split_edge(expr)
    if resolved is None:
        return None
    source, target, weight, kind = resolved
    if not source or not target:
        logger.debug("Dropping edge with an empty endpoint: %r", line)
        return None
    return EdgeDecl(source=source, target=target, label=label.strip() or None, weight=weight, kind=kind)


RULES: Tuple[Rule, ...] = (match_title, match_node, match_edge)


@dataclass
class _Accumulator:
    """Per-call parse state, discarded once the model is built."""
    title: str = DEFAULT_TITLE
    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: List[EdgeDecl] = field(default_factory=list)

    def apply(self, decl: Declaration) -> None:
        if isinstance(decl, TitleDecl):
            if decl.title:
                self.title = decl.title
        elif isinstance(decl, NodeDecl):
            self.nodes[decl.node_id] = Node(
                decl.node_id, size=decl.size, color=decl.color, icon=decl.icon
            )
        else:
            for node_id in (decl.source, decl.target):
                if node_id not in self.nodes:
                    self.nodes[node_id] = Node(node_id)
            self.edges.append(decl)

    def build(self) -> GraphModel:
        graph = GraphModel(title=self.title)
        for node in self.nodes.values():
            graph.add_node(node)
        for decl in self.edges:
            if not (graph.has_node(decl.source) and graph.has_node(decl.target)):
                continue
            graph.add_edge(Edge(decl.source, decl.target, label=decl.label, size=decl.weight, kind=decl.kind))
        return graph


def parse_line(line: str) -> Optional[Declaration]:
    """Offer one trimmed line to each rule; first match wins."""
    tokens = tokenize(line)
    for rule in RULES:
        decl = rule(line, tokens)
        if decl is not None:
            return decl
    return None


def parse(text: str) -> GraphModel:
    """Parse diagram text into a fresh GraphModel. Never raises on bad lines."""
    acc = _Accumulator()
    for line in iter_lines(text or ""):
        decl = parse_line(line)
        if decl is None:
            logger.debug("Skipping unrecognised line: %r", line)
            continue
        acc.apply(decl)
    return acc.build()


class GraphParser:
    """Object-style entry point; holds no state between calls."""

    def parse(self, text: str) -> GraphModel:
        return parse(text)
