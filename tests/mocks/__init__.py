"""Mock implementations for testing."""

from tests.mocks.catalog import MockCatalogClient, MockDetailClient, book, books
from tests.mocks.clock import FakeClock

__all__ = ["FakeClock", "MockCatalogClient", "MockDetailClient", "book", "books"]
