"""Catalog REST client backed by aiohttp.

Implements the CatalogListingClient, CatalogDetailClient and
CatalogRankingClient protocols against the storefront backend.
"""

from __future__ import annotations

from typing import Any

import aiohttp

from carousel_engine.core.config import Settings
from carousel_engine.core.items import Item, normalize_item
from carousel_engine.core.logging import get_logger
from carousel_engine.core.ranking_prefetch import RankingRow, group_rankings
from carousel_engine.ports.catalog import PageResponse
from carousel_engine.providers.schemas import parse_page, unwrap_envelope

logger = get_logger(__name__)


class CatalogAPIError(Exception):
    """Exception raised when a catalog request fails.

    Raised for network errors and server-side (5xx) failures. Client-side
    (4xx) responses on listings are treated as empty pages instead.

    Attributes:
        status: HTTP status code, when a response was received.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def with_api_prefix(endpoint: str, prefix: str = "/api/v1") -> str:
    """Add the API prefix to endpoints that do not carry one."""
    if endpoint.startswith("/api/"):
        return endpoint
    if not endpoint.startswith("/"):
        endpoint = "/" + endpoint
    return prefix.rstrip("/") + endpoint


def compact_params(params: dict[str, Any]) -> dict[str, str]:
    """Drop empty values and stringify the rest for the query string."""
    out: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            out[key] = ",".join(str(v) for v in value)
        elif isinstance(value, bool):
            out[key] = "true" if value else "false"
        else:
            out[key] = str(value)
    return out


class CatalogAPIClient:
    """HTTP client for the catalog listing, detail and ranking endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        prefix: str = "/api/v1",
        timeout: float = 30.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Scheme and host of the backend.
            prefix: Path prefix for endpoints that lack one.
            timeout: Total timeout per request, in seconds.
            session: Shared session. When None, each request opens its own.
        """
        self._base_url = base_url.rstrip("/")
        self._prefix = prefix
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

    @classmethod
    def from_settings(
        cls, settings: Settings, session: aiohttp.ClientSession | None = None
    ) -> CatalogAPIClient:
        return cls(
            settings.api_base_url,
            prefix=settings.api_prefix,
            timeout=settings.request_timeout,
            session=session,
        )

    def url_for(self, endpoint: str) -> str:
        return self._base_url + with_api_prefix(endpoint, self._prefix)

    async def fetch_page(self, endpoint: str, params: dict[str, Any]) -> PageResponse:
        """Fetch one listing page.

        Raises:
            CatalogAPIError: On network errors or 5xx responses.
        """
        status, data = await self._get_json(endpoint, params)
        if status >= 400:
            logger.warning("listing_client_error", endpoint=endpoint, status=status)
            return PageResponse()
        return parse_page(data)

    async def fetch_detail(self, item_id: int | str) -> Item:
        """Fetch one item's full record.

        Raises:
            CatalogAPIError: On network errors, any error status, or a
                payload that is not an object.
        """
        status, data = await self._get_json(f"/books/{item_id}", {})
        if status >= 400:
            raise CatalogAPIError(
                f"Detail request for {item_id} failed with status {status}",
                status=status,
            )
        payload = unwrap_envelope(data)
        if not isinstance(payload, dict):
            raise CatalogAPIError(f"Invalid detail payload for {item_id}")
        return normalize_item(payload)

    async def fetch_top_selling(self, limit: int = 5) -> dict[str, list[RankingRow]]:
        """Fetch the top-selling rankings grouped by category.

        Raises:
            CatalogAPIError: On network errors or 5xx responses.
        """
        status, data = await self._get_json("/books/top-selling", {"limit": limit})
        if status >= 400:
            logger.warning("ranking_client_error", status=status)
            return {}
        return group_rankings(unwrap_envelope(data))

    async def _get_json(self, endpoint: str, params: dict[str, Any]) -> tuple[int, Any]:
        url = self.url_for(endpoint)
        query = compact_params(params)
        logger.debug("catalog_request", url=url, params=query)

        try:
            if self._session is not None:
                return await self._send(self._session, url, query)
            async with aiohttp.ClientSession() as session:
                return await self._send(session, url, query)
        except aiohttp.ClientError as ex:
            logger.error("catalog_network_error", url=url, error=str(ex))
            raise CatalogAPIError(f"Network error during catalog request: {ex}") from ex

    async def _send(
        self, session: aiohttp.ClientSession, url: str, query: dict[str, str]
    ) -> tuple[int, Any]:
        async with session.get(url, params=query, timeout=self._timeout) as response:
            if response.status >= 500:
                error_text = await response.text()
                logger.error(
                    "catalog_server_error",
                    url=url,
                    status=response.status,
                    body=error_text[:200],
                )
                raise CatalogAPIError(
                    f"Catalog request failed with status {response.status}",
                    status=response.status,
                )
            if response.status >= 400:
                return response.status, None
            try:
                data = await response.json(content_type=None)
            except ValueError:
                logger.warning("catalog_invalid_json", url=url)
                data = None
            return response.status, data
