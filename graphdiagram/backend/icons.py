"""
Icon embedding for node glyphs.

Each distinct icon URI is loaded once per render, its inner markup wrapped in
a ``<symbol>`` with a stable id, and nodes reference it through ``<use>``.
Remote icons are fetched concurrently with httpx; local paths and ``file://``
URIs are read from disk. A failed load falls back to a plain ``<image>``
reference for that node.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import unquote, urlparse

import httpx

from graphdiagram.core.ir import Node
from graphdiagram.backend.geometry import fmt_number
from graphdiagram.backend.labels import escape_xml

logger = logging.getLogger(__name__)

DEFAULT_VIEW_BOX = "0 0 100 100"
ICON_SCALE = 0.8
ICON_PADDING = 0.1

_SVG_OPEN = re.compile(r"<svg\b[^>]*>", re.IGNORECASE)
_SVG_INNER = re.compile(r"<svg\b[^>]*>(.*)</svg>", re.IGNORECASE | re.DOTALL)
_VIEW_BOX = re.compile(r"""\bviewBox\s*=\s*["']([^"']+)["']""")
_WIDTH = re.compile(r"""\swidth\s*=\s*["']?([\d.]+)""")
_HEIGHT = re.compile(r"""\sheight\s*=\s*["']?([\d.]+)""")
_FILL = re.compile(r"""\sfill\s*=\s*["']([^"']+)["']""")


class IconFetchError(RuntimeError):
    """An icon could not be loaded."""


@dataclass(frozen=True)
class IconSymbol:
    id: str
    content: str
    view_box: str


def symbol_id(uri: str) -> str:
    """Stable id from a 32-bit rolling string hash of the URI."""
    h = 0
    for ch in uri:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return f"img_{abs(h)}"


def parse_view_box(svg_text: str) -> str:
    """viewBox of the root <svg>, else one built from width/height, else 0 0 100 100."""
    m = _SVG_OPEN.search(svg_text)
    if not m:
        return DEFAULT_VIEW_BOX
    tag = m.group(0)
    vb = _VIEW_BOX.search(tag)
    if vb:
        return vb.group(1).strip()
    width, height = _WIDTH.search(tag), _HEIGHT.search(tag)
    if width and height:
        try:
            return f"0 0 {fmt_number(float(width.group(1)))} {fmt_number(float(height.group(1)))}"
        except ValueError:
            pass
    return DEFAULT_VIEW_BOX


def to_symbol(svg_text: str, sid: str) -> IconSymbol:
    """Wrap the inner markup of an SVG document in a <symbol>."""
    view_box = parse_view_box(svg_text)
    m = _SVG_INNER.search(svg_text)
    inner = m.group(1).strip() if m else svg_text.strip()
    # A fill on the root element would be lost with the element itself.
    root = _SVG_OPEN.search(svg_text)
    fill = _FILL.search(root.group(0)) if root else None
    if fill:
        inner = f'<g fill="{fill.group(1)}">{inner}</g>'
    content = f'<symbol id="{sid}" viewBox="{view_box}">{inner}</symbol>'
    return IconSymbol(sid, content, view_box)


def _local_path(uri: str) -> Path:
    if uri.startswith("file://"):
        return Path(unquote(urlparse(uri).path))
    return Path(uri)


async def fetch_icon(uri: str, client: httpx.AsyncClient) -> str:
    """Load the raw SVG text behind an icon URI."""
    if uri.startswith(("http://", "https://")):
        try:
            response = await client.get(uri)
        except httpx.HTTPError as e:
            raise IconFetchError(f"{uri}: {e}") from e
        if response.status_code != 200:
            raise IconFetchError(f"{uri}: HTTP error! status: {response.status_code}")
        return response.text

    path = _local_path(uri)
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IconFetchError(f"{uri}: {e}") from e


async def load_symbols(
    uris: Iterable[str],
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 10.0,
) -> Dict[str, IconSymbol]:
    """Fetch every distinct URI concurrently; failures are logged and left out."""
    unique = list(dict.fromkeys(u for u in uris if u))
    if not unique:
        return {}

    async def load(c: httpx.AsyncClient, uri: str) -> Tuple[str, Optional[IconSymbol]]:
        try:
            return uri, to_symbol(await fetch_icon(uri, c), symbol_id(uri))
        except IconFetchError as e:
            logger.warning("Failed to fetch icon %s: %s", uri, e)
            return uri, None

    if client is None:
        async with httpx.AsyncClient(timeout=timeout) as own:
            results = await asyncio.gather(*(load(own, u) for u in unique))
    else:
        results = await asyncio.gather(*(load(client, u) for u in unique))
    return {uri: symbol for uri, symbol in results if symbol is not None}


def _aspect(view_box: str) -> float:
    try:
        parts = [float(v) for v in re.split(r"[\s,]+", view_box.strip())]
        width, height = parts[2], parts[3]
    except (ValueError, IndexError):
        return 1.0
    if width <= 0 or height <= 0:
        return 1.0
    return width / height


def fit_box(x: float, y: float, width: float, height: float, padding: float, aspect: float) -> Tuple[float, float, float, float]:
    """Largest box of the given aspect ratio centred inside a padded area."""
    avail_w = width - padding * 2
    avail_h = height - padding * 2
    if avail_w <= 0 or avail_h <= 0:
        return x + width / 2, y + height / 2, 0.0, 0.0
    if avail_w / avail_h > aspect:
        scaled_h = avail_h
        scaled_w = scaled_h * aspect
    else:
        scaled_w = avail_w
        scaled_h = scaled_w / aspect
    return (
        x + padding + (avail_w - scaled_w) / 2,
        y + padding + (avail_h - scaled_h) / 2,
        scaled_w,
        scaled_h,
    )


def icon_markup(node: Node, symbol: Optional[IconSymbol]) -> str:
    """<use> of the embedded symbol, or an external <image> when not embedded."""
    if not node.icon:
        return ""
    half = node.size * ICON_SCALE
    if symbol is not None:
        x, y, w, h = fit_box(node.x - half, node.y - half, half * 2, half * 2, node.size * ICON_PADDING, _aspect(symbol.view_box))
        return (
            f'<use href="#{symbol.id}" x="{fmt_number(x)}" y="{fmt_number(y)}" '
            f'width="{fmt_number(w)}" height="{fmt_number(h)}"/>'
        )
    return (
        f'<image href="{escape_xml(node.icon)}" x="{fmt_number(node.x - half)}" y="{fmt_number(node.y - half)}" '
        f'width="{fmt_number(half * 2)}" height="{fmt_number(half * 2)}" preserveAspectRatio="xMidYMid meet"/>'
    )
