"""
Frontend: turns diagram text into a GraphModel.

- parse: pure function, text -> GraphModel
- GraphParser: stateless object wrapper around parse
"""

from .parser import GraphParser, parse, parse_line, tokenize, NAMED_COLORS
from .icons import NODE_KINDS, icon_for_kind

__all__ = [
    "GraphParser",
    "parse",
    "parse_line",
    "tokenize",
    "NAMED_COLORS",
    "NODE_KINDS",
    "icon_for_kind",
]
