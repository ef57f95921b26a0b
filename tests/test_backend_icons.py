"""Tests for icon loading and placement."""

import asyncio

import httpx
import pytest

from graphdiagram.core.ir import Node
from graphdiagram.backend.icons import (
    IconFetchError, IconSymbol, fetch_icon, fit_box, icon_markup, load_symbols, parse_view_box,
    symbol_id, to_symbol,
)
from graphdiagram.frontend.icons import icon_for_kind

ICON = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 12"><path d="M0 0h24v12z"/></svg>'


def mock_client(routes):
    """AsyncClient answering from a {url: (status, body)} table."""
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        status, body = routes.get(str(request.url), (404, "missing"))
        return httpx.Response(status, text=body)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client, requested


class TestSymbols:
    def test_symbol_id_is_stable_string_hash(self):
        assert symbol_id("") == "img_0"
        assert symbol_id("abc") == "img_96354"
        assert symbol_id("https://example.com/a.svg") == symbol_id("https://example.com/a.svg")
        assert symbol_id("a.svg") != symbol_id("b.svg")

    def test_symbol_id_wraps_to_32_bits(self):
        sid = symbol_id("https://example.com/some/rather/long/icon/path.svg")
        assert sid.startswith("img_")
        assert int(sid[4:]) <= 2 ** 31

    @pytest.mark.parametrize("markup, expected", [
        (ICON, "0 0 24 12"),
        ('<svg width="32" height="16"><g/></svg>', "0 0 32 16"),
        ("<svg width='10px' height='20px'></svg>", "0 0 10 20"),
        ("<svg><g/></svg>", "0 0 100 100"),
        ("not svg at all", "0 0 100 100"),
    ])
    def test_parse_view_box(self, markup, expected):
        assert parse_view_box(markup) == expected

    def test_to_symbol_wraps_inner_markup(self):
        symbol = to_symbol(ICON, "img_1")
        assert symbol.content == '<symbol id="img_1" viewBox="0 0 24 12"><path d="M0 0h24v12z"/></symbol>'

    def test_root_fill_is_kept(self):
        with open(icon_for_kind("book"), encoding="utf-8") as f:
            symbol = to_symbol(f.read(), "img_2")
        assert symbol.view_box == "0 0 24 24"
        assert '<g fill="#fff">' in symbol.content


class TestFetch:
    @pytest.mark.asyncio
    async def test_remote_icons_fetched_once_each(self):
        url = "https://icons.test/a.svg"
        client, requested = mock_client({url: (200, ICON)})
        async with client:
            symbols = await load_symbols([url, url, None, url], client=client)

        assert requested == [url]
        assert symbols[url].id == symbol_id(url)
        assert symbols[url].view_box == "0 0 24 12"

    @pytest.mark.asyncio
    async def test_failed_fetch_is_left_out(self, caplog):
        good, bad = "https://icons.test/good.svg", "https://icons.test/bad.svg"
        client, _ = mock_client({good: (200, ICON)})
        async with client:
            symbols = await load_symbols([good, bad], client=client)

        assert set(symbols) == {good}
        assert "Failed to fetch icon" in caplog.text

    @pytest.mark.asyncio
    async def test_http_error_status_raises(self):
        client, _ = mock_client({})
        async with client:
            with pytest.raises(IconFetchError, match="404"):
                await fetch_icon("https://icons.test/none.svg", client)

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(IconFetchError):
                await fetch_icon("https://icons.test/a.svg", client)

    @pytest.mark.asyncio
    async def test_local_paths_and_file_uris(self, tmp_path):
        path = tmp_path / "icon.svg"
        path.write_text(ICON, encoding="utf-8")

        symbols = await load_symbols([str(path), path.as_uri()])

        assert set(symbols) == {str(path), path.as_uri()}

    @pytest.mark.asyncio
    async def test_missing_local_file(self, tmp_path):
        async with httpx.AsyncClient() as client:
            with pytest.raises(IconFetchError):
                await fetch_icon(str(tmp_path / "nope.svg"), client)

    @pytest.mark.asyncio
    async def test_no_uris(self):
        assert await load_symbols([]) == {}

    @pytest.mark.asyncio
    async def test_distinct_icons_are_fetched_concurrently(self):
        urls = ["https://icons.test/one.svg", "https://icons.test/two.svg"]
        in_flight = []
        all_started = asyncio.Event()

        async def handler(request):
            in_flight.append(str(request.url))
            if len(in_flight) == len(urls):
                all_started.set()
            # Every request must be in flight before any of them returns.
            await asyncio.wait_for(all_started.wait(), timeout=1.0)
            return httpx.Response(200, text=ICON)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            symbols = await load_symbols(urls, client=client)

        assert sorted(in_flight) == sorted(urls)
        assert set(symbols) == set(urls)


class TestPlacement:
    def test_fit_box_preserves_aspect(self):
        assert fit_box(0, 0, 100, 100, 10, 2.0) == (10, 30, 80, 40)
        assert fit_box(0, 0, 100, 100, 10, 0.5) == (30, 10, 40, 80)

    def test_fit_box_without_room(self):
        assert fit_box(0, 0, 10, 10, 6, 1.0) == (5, 5, 0.0, 0.0)

    def test_use_for_embedded_symbol(self):
        node = Node("A", size=10, icon="a.svg", x=0.0, y=0.0)
        markup = icon_markup(node, IconSymbol("img_7", "", "0 0 24 24"))

        assert markup == '<use href="#img_7" x="-7" y="-7" width="14" height="14"/>'

    def test_image_fallback(self):
        node = Node("A", size=10, icon="https://icons.test/a.svg?x=1&y=2", x=0.0, y=0.0)
        markup = icon_markup(node, None)

        assert markup.startswith('<image href="https://icons.test/a.svg?x=1&amp;y=2"')
        assert 'width="16"' in markup

    def test_no_icon(self):
        assert icon_markup(Node("A", x=0.0, y=0.0), None) == ""
