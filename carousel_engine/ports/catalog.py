"""Catalog backend protocols.

This module defines the interfaces (Protocols) the carousel engine consumes
from the catalog listing and detail services. Implementations can use any
HTTP client; the engine only depends on these shapes.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from carousel_engine.core.items import Item

# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class PageResponse:
    """One page of a server-paginated listing.

    Attributes:
        content: Normalized items of the page, in server order.
        total_pages: Total number of pages for the query. None when the
            response did not say, in which case the caller keeps its
            previous value.
        total_elements: Total number of items for the query, if reported.
    """

    content: list[Item] = field(default_factory=list)
    total_pages: int | None = None
    total_elements: int | None = None


# =============================================================================
# Client Protocols
# =============================================================================


class CatalogListingClient(Protocol):
    """Protocol for paginated catalog listings."""

    async def fetch_page(self, endpoint: str, params: dict[str, Any]) -> PageResponse:
        """Fetch one page of a listing.

        Args:
            endpoint: Listing path, e.g. "/books".
            params: Domain query parameters plus 0-based ``page`` and
                ``size``.

        Returns:
            The parsed page. Malformed responses come back as empty pages.

        Raises:
            Exception: On network failures and 5xx responses.
        """
        ...


class CatalogDetailClient(Protocol):
    """Protocol for single-item detail lookups."""

    async def fetch_detail(self, item_id: int | str) -> Item:
        """Fetch the full record of one item, including its canonical slug.

        Args:
            item_id: Backend identifier of the item.

        Returns:
            The normalized detail record.
        """
        ...


class CatalogRankingClient(Protocol):
    """Protocol for top-selling rankings."""

    async def fetch_top_selling(self, limit: int = 5) -> dict[str, list[Any]]:
        """Fetch rankings grouped by category.

        Args:
            limit: Rows per category.

        Returns:
            Mapping of category name to its ranking rows.
        """
        ...
