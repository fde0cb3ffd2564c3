"""
Unit Tests for HttpCatalogClient

Tests for:
- getBook / getBooks request shape
- Empty responses for unknown books
- Transport and payload errors raised as CatalogError

Uses httpx.MockTransport; no network access.
"""

import httpx
import pytest

from summary_player.domain.library.entities import BookStatus
from summary_player.domain.shared.exceptions import CatalogError
from summary_player.infrastructure.catalog.http_catalog_client import HttpCatalogClient

BASE_URL = "https://catalog.test"

BOOK_PAYLOAD = {
    "id": "f9gy1gpai8",
    "author": "Dale Carnegie",
    "title": "How to Win Friends and Influence People",
    "subTitle": "Time-tested advice",
    "imageLink": "https://example.com/cover.png",
    "audioLink": "https://example.com/audio.mp3",
    "totalRating": 12,
    "averageRating": 4.4,
    "keyIdeas": 8,
    "type": "audio & text",
    "status": "selected",
    "subscriptionRequired": False,
    "summary": "...",
    "tags": ["Communication Skills"],
}


def _client(handler) -> HttpCatalogClient:
    transport = httpx.MockTransport(handler)
    return HttpCatalogClient(client=httpx.AsyncClient(base_url=BASE_URL, transport=transport))


class TestGetBook:
    """Tests for HttpCatalogClient.get_book."""

    @pytest.mark.asyncio
    async def test_fetches_book(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=BOOK_PAYLOAD)

        book = await _client(handler).get_book("f9gy1gpai8")

        assert book is not None
        assert book.id == "f9gy1gpai8"
        assert book.sub_title == "Time-tested advice"
        assert book.audio_link == "https://example.com/audio.mp3"
        assert book.status is BookStatus.SELECTED
        assert book.tags == ["Communication Skills"]
        assert requests[0].url.path == "/getBook"
        assert requests[0].url.params["id"] == "f9gy1gpai8"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"", b"{}", b"null"])
    async def test_unknown_book_is_none(self, body):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        assert await _client(handler).get_book("missing") is None

    @pytest.mark.asyncio
    async def test_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="internal")

        with pytest.raises(CatalogError, match="failed"):
            await _client(handler).get_book("f9gy1gpai8")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CatalogError):
            await _client(handler).get_book("f9gy1gpai8")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(CatalogError, match="unexpected payload"):
            await _client(handler).get_book("f9gy1gpai8")

    @pytest.mark.asyncio
    async def test_wrong_shape(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[BOOK_PAYLOAD])

        with pytest.raises(CatalogError, match="unexpected payload"):
            await _client(handler).get_book("f9gy1gpai8")


class TestGetBooks:
    """Tests for HttpCatalogClient.get_books."""

    @pytest.mark.asyncio
    async def test_fetches_listing(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            second = {**BOOK_PAYLOAD, "id": "2l0idxm1rvw", "audioLink": ""}
            return httpx.Response(200, json=[BOOK_PAYLOAD, second])

        books = await _client(handler).get_books(BookStatus.RECOMMENDED)

        assert [b.id for b in books] == ["f9gy1gpai8", "2l0idxm1rvw"]
        assert books[1].has_audio is False
        assert requests[0].url.path == "/getBooks"
        assert requests[0].url.params["status"] == "recommended"

    @pytest.mark.asyncio
    async def test_invalid_book_in_listing(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"title": "no id"}])

        with pytest.raises(CatalogError):
            await _client(handler).get_books(BookStatus.SUGGESTED)


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open():
    inner = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    client = HttpCatalogClient(client=inner)

    await client.close()

    assert not inner.is_closed
    await inner.aclose()
