"""Shared pytest fixtures for carousel engine tests."""

import pytest

from carousel_engine.core.ranking_prefetch import InMemoryDetailCache
from tests.mocks.catalog import MockCatalogClient, MockDetailClient, books
from tests.mocks.clock import FakeClock

# Configure pytest-asyncio for the async tests
pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def three_page_client() -> MockCatalogClient:
    """Provide a listing client with three non-overlapping pages of 6 books.

    Returns:
        MockCatalogClient: Pages hold ids 1-6, 7-12 and 13-18.
    """
    return MockCatalogClient([books(1, 6), books(7, 6), books(13, 6)])


@pytest.fixture
def detail_cache() -> InMemoryDetailCache:
    """Provide a fresh detail cache for each test."""
    return InMemoryDetailCache()


@pytest.fixture
def detail_client() -> MockDetailClient:
    """Provide a detail client knowing books 1-3 (book 3 has no slug)."""
    return MockDetailClient(
        details={
            1: {"id": 1, "slug": "dune", "title": "Dune"},
            2: {"id": 2, "slug": "emma", "title": "Emma"},
            3: {"id": 3, "title": "Untitled"},
        }
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
