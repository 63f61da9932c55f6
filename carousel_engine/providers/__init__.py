"""Catalog backend implementations.

This module contains concrete implementations of the catalog protocols
defined in carousel_engine/ports/catalog.py.
"""

from carousel_engine.providers.catalog_api import (
    CatalogAPIClient,
    CatalogAPIError,
    compact_params,
    with_api_prefix,
)
from carousel_engine.providers.schemas import PageEnvelope, parse_page

__all__ = [
    "CatalogAPIClient",
    "CatalogAPIError",
    "PageEnvelope",
    "compact_params",
    "parse_page",
    "with_api_prefix",
]
