"""Node kind keywords and the icons bundled for them."""

from importlib.resources import files
from typing import Optional

NODE_KINDS = (
    "node",
    "person",
    "group",
    "tag",
    "message",
    "location",
    "document",
    "company",
    "concept",
    "book",
    "education",
)


def icon_for_kind(kind: str) -> Optional[str]:
    """Return the path of the bundled icon for a node kind, None for plain nodes."""
    kind = kind.lower()
    if kind == "node" or kind not in NODE_KINDS:
        return None
    return str(files("graphdiagram").joinpath("icons", f"{kind}.svg"))
