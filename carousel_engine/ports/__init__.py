"""Ports (interfaces) for the carousel engine.

This module contains Protocol definitions that define the boundary between
the engine and the catalog backend it pages through.
"""

from carousel_engine.ports.catalog import (
    CatalogDetailClient,
    CatalogListingClient,
    CatalogRankingClient,
    PageResponse,
)

__all__ = [
    # Data classes
    "PageResponse",
    # Protocols
    "CatalogDetailClient",
    "CatalogListingClient",
    "CatalogRankingClient",
]
