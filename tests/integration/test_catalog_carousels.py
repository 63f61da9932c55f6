"""Integration tests for carousels driven by the catalog REST client.

These tests wire real Carousel instances to CatalogAPIClient with a mocked
aiohttp session, and verify the end-to-end flows: first page load, paging
on navigation, flash-sale filtering and looping, and error recovery.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from carousel_engine.core.carousel import Carousel
from carousel_engine.core.ranking_prefetch import (
    InMemoryDetailCache,
    RankingBoard,
    RankingPrefetcher,
)
from carousel_engine.core.variants import flash_sale_options, product_carousel_options
from carousel_engine.providers.catalog_api import CatalogAPIClient

# --- Test Fixtures ---


def create_mock_response(status: int, payload: Any = None) -> AsyncMock:
    """Create a mock aiohttp response.

    Args:
        status: HTTP status code.
        payload: JSON body returned by response.json().

    Returns:
        AsyncMock usable as an async context manager.
    """
    response = AsyncMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    response.text = AsyncMock(return_value="")
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


class FakeCatalogBackend:
    """Routes mocked GET requests to scripted listing pages.

    Attributes:
        pages: Raw page contents, indexed by the ``page`` query parameter.
        details: Raw detail payloads keyed by id.
        statuses: Status codes to return once for a given page.
        requests: (url, params) of every request, in order.
    """

    def __init__(
        self,
        pages: list[list[dict[str, Any]]],
        details: dict[str, dict[str, Any]] | None = None,
        rankings: list[dict[str, Any]] | None = None,
    ) -> None:
        self.pages = pages
        self.details = details or {}
        self.rankings = rankings or []
        self.statuses: dict[int, int] = {}
        self.requests: list[tuple[str, dict[str, str]]] = []

    def session(self) -> MagicMock:
        session = MagicMock()
        session.get = MagicMock(side_effect=self.get)
        return session

    def get(self, url: str, params: dict[str, str], timeout: Any = None) -> AsyncMock:
        self.requests.append((url, dict(params)))
        if url.endswith("/books/top-selling"):
            return create_mock_response(200, {"data": self.rankings})
        if "page" not in params:
            book_id = url.rsplit("/", 1)[-1]
            if book_id not in self.details:
                return create_mock_response(404)
            return create_mock_response(200, self.details[book_id])

        page = int(params["page"])
        if page in self.statuses:
            return create_mock_response(self.statuses.pop(page))
        content = self.pages[page] if page < len(self.pages) else []
        return create_mock_response(
            200,
            {"content": content, "totalPages": len(self.pages), "totalElements": 0},
        )

    @property
    def requested_pages(self) -> list[int]:
        return [int(params["page"]) for _, params in self.requests if "page" in params]


def raw_book(book_id: int, discount: int) -> dict[str, Any]:
    price = 100_000
    return {
        "id": book_id,
        "slug": f"book-{book_id}",
        "title": f"Book {book_id}",
        "price": price,
        "finalPrice": price * (100 - discount) // 100,
        "thumbnail": f"https://firebasestorage.googleapis.com/v0/b/shop/o/{book_id}.jpg",
    }


# --- Tests ---


class TestFlashSaleFlow:
    """Flash-sale carousel against the REST client."""

    @pytest.mark.asyncio
    async def test_loads_filters_and_pages(self) -> None:
        backend = FakeCatalogBackend(
            [
                [raw_book(i, 20 + i) for i in range(1, 7)],
                [raw_book(i, 5) for i in range(7, 10)] + [raw_book(i, 40 + i) for i in range(10, 13)],
            ]
        )
        client = CatalogAPIClient("http://shop.test", session=backend.session())
        carousel = Carousel(flash_sale_options(), client=client)

        await carousel.mount()
        carousel.resize(1500)
        assert [item.discount_percent for item in carousel.items] == [26, 25, 24, 23, 22, 21]
        assert carousel.items[0].image.endswith("6.jpg?alt=media")

        url, params = backend.requests[0]
        assert url == "http://shop.test/api/v1/books"
        assert params == {
            "status": "ACTIVE",
            "sort": "createdAt",
            "direction": "DESC",
            "page": "0",
            "size": "6",
        }

        # Six columns fill the window; the next step has to fetch page 1
        await carousel.step_forward()
        await carousel.settle()

        assert backend.requested_pages == [0, 1]
        discounts = [item.discount_percent for item in carousel.items]
        assert discounts == sorted(discounts, reverse=True)
        assert all(d >= 20 for d in discounts)
        assert len(carousel.items) == 9
        assert carousel.window.start_index == 1
        assert carousel.view().translate_x == -(229 + 20)

    @pytest.mark.asyncio
    async def test_loops_when_exhausted(self) -> None:
        backend = FakeCatalogBackend([[raw_book(i, 30) for i in range(1, 9)]])
        client = CatalogAPIClient("http://shop.test", session=backend.session())
        carousel = Carousel(flash_sale_options(), client=client)

        await carousel.mount()
        for _ in range(2):
            await carousel.step_forward()
            await carousel.settle()
        assert carousel.window.start_index == 2

        await carousel.step_forward()
        assert carousel.window.start_index == 0
        assert backend.requested_pages == [0]

    @pytest.mark.asyncio
    async def test_server_error_then_retry(self) -> None:
        backend = FakeCatalogBackend(
            [
                [raw_book(i, 30) for i in range(1, 7)],
                [raw_book(i, 30) for i in range(7, 13)],
            ]
        )
        backend.statuses[1] = 502
        client = CatalogAPIClient("http://shop.test", session=backend.session())
        carousel = Carousel(flash_sale_options(), client=client)
        await carousel.mount()

        await carousel.step_forward()
        view = carousel.view()
        assert view.error == "Could not load data."
        assert view.retryable
        assert len(carousel.items) == 6

        assert await carousel.retry() == 6
        assert carousel.view().error is None
        assert backend.requested_pages == [0, 1, 1]


class TestProductCarouselFlow:
    """Generic product carousel against the REST client."""

    @pytest.mark.asyncio
    async def test_client_error_shows_empty_hint(self) -> None:
        backend = FakeCatalogBackend([[raw_book(1, 0)]])
        backend.statuses[0] = 400
        client = CatalogAPIClient("http://shop.test", session=backend.session())
        carousel = Carousel(
            product_carousel_options(endpoint="/books", params={"categoryId": 3}),
            client=client,
        )

        await carousel.mount()

        view = carousel.view()
        assert view.error is None
        assert view.empty_hint == "No products yet."
        assert view.columns == []

    @pytest.mark.asyncio
    async def test_two_row_grid(self) -> None:
        backend = FakeCatalogBackend([[raw_book(i, 0) for i in range(1, 9)]])
        client = CatalogAPIClient("http://shop.test", session=backend.session())
        carousel = Carousel(
            product_carousel_options(rows=2, cols=3, endpoint="/books"),
            client=client,
        )

        await carousel.mount()

        assert backend.requests[0][1]["size"] == "6"
        assert [[item.id for item in column] for column in carousel.columns] == [
            [1, 5],
            [2, 6],
            [3, 7],
            [4, 8],
        ]
        assert (await carousel.handle_wheel(0, 50)).start_index == 1
        await carousel.settle()
        assert backend.requested_pages == [0]


class TestRankingFlow:
    """Top-selling board with hover prefetch against the REST client."""

    @pytest.mark.asyncio
    async def test_hover_then_open_uses_slug(self) -> None:
        backend = FakeCatalogBackend(
            [],
            details={"1": raw_book(1, 0), "2": raw_book(2, 0)},
            rankings=[
                {"bookId": 1, "title": "Book 1", "category": "Sci-Fi", "sold": 10},
                {"bookId": 2, "title": "Book 2", "category": "Sci-Fi", "sold": 8},
                {"bookId": 9, "title": "Gone", "category": "Sci-Fi", "sold": 1},
            ],
        )
        client = CatalogAPIClient("http://shop.test", session=backend.session())
        routes: list[str] = []
        prefetcher = RankingPrefetcher(client, InMemoryDetailCache(), navigate=routes.append)

        board = RankingBoard(prefetcher, await client.fetch_top_selling(limit=5))
        board.hover(2)
        board.hover(9)
        await prefetcher.settle()

        assert board.open(1) == "/books/book-1"
        assert board.open(2) == "/books/book-2"
        assert board.open(9) == "/books/id/9"
        assert routes == ["/books/book-1", "/books/book-2", "/books/id/9"]
