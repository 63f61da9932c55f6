"""Race-safe incremental page fetching for server-backed carousels.

A coordinator owns the local item list of one carousel and the pagination
state behind it. Requests are stamped with the fingerprint of the query that
issued them; a response whose fingerprint is no longer current (the query
changed, or the carousel was unmounted) is discarded without touching any
state. Pages for one fingerprint are requested strictly in order because
only one request may be in flight at a time.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from carousel_engine.core.config import DEFAULT_FETCH_ERROR_MESSAGE
from carousel_engine.core.errors import ErrorCategory, classify_error, is_retryable
from carousel_engine.core.items import Item
from carousel_engine.core.logging import get_logger
from carousel_engine.core.page_merger import PageMerger

if TYPE_CHECKING:
    from carousel_engine.ports.catalog import CatalogListingClient, PageResponse

logger = get_logger(__name__)

# Page count used until the server has told us the real one
UNKNOWN_TOTAL_PAGES = sys.maxsize


class FetchStatus(Enum):
    """Coarse state of the coordinator."""

    READY = "ready"
    FETCHING = "fetching"
    ERROR = "error"


@dataclass(frozen=True)
class QueryFingerprint:
    """Identity of the query a request was issued under.

    The generation increases on every query change, so two fingerprints
    never compare equal across a change even if the parameters are the same.
    """

    generation: int
    endpoint: str | None
    params_key: str


def params_key(params: dict[str, Any] | None) -> str:
    """Canonical representation of query parameters."""
    return json.dumps(params or {}, sort_keys=True, default=str)


@dataclass
class FetchState:
    """Pagination bookkeeping for the current query.

    Attributes:
        page: Index of the last page merged (0-based).
        total_pages: Page count reported by the server.
        in_flight: Whether a request for the current query is pending.
        error: Short user-facing message of the last failure, if any.
        error_category: Classified cause of the last failure.
        loaded: Whether the first page of the current query resolved.
    """

    page: int = 0
    total_pages: int = UNKNOWN_TOTAL_PAGES
    in_flight: bool = False
    error: str | None = None
    error_category: ErrorCategory | None = None
    loaded: bool = False

    @property
    def has_more(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def retryable(self) -> bool:
        return self.error_category is not None and is_retryable(self.error_category)

    @property
    def status(self) -> FetchStatus:
        if self.in_flight:
            return FetchStatus.FETCHING
        if self.error is not None:
            return FetchStatus.ERROR
        return FetchStatus.READY


class FetchCoordinator:
    """Fetches, merges and tracks the pages behind one carousel."""

    def __init__(
        self,
        client: CatalogListingClient | None,
        merger: PageMerger[Item],
        *,
        page_size: int,
        near_end_threshold: int = 0,
        error_message: str = DEFAULT_FETCH_ERROR_MESSAGE,
        name: str = "carousel",
    ) -> None:
        """Initialize the coordinator.

        Args:
            client: Listing client. None means the carousel is static.
            merger: Merges fetched pages into the local list.
            page_size: Number of items requested per page.
            near_end_threshold: How many columns from the local end the
                window must be before the next page is prefetched.
            error_message: Message recorded when a fetch fails.
            name: Carousel name bound into every log line.
        """
        self._client = client
        self._merger = merger
        self.page_size = max(1, page_size)
        self.near_end_threshold = max(0, near_end_threshold)
        self._error_message = error_message
        self._log = logger.bind(carousel=name)

        self._generation = 0
        self._endpoint: str | None = None
        self._params: dict[str, Any] = {}
        self._fingerprint = QueryFingerprint(0, None, params_key(None))
        self._state = FetchState(total_pages=1)
        self._items: list[Item] = []
        self._mounted = True

    @property
    def items(self) -> list[Item]:
        return self._items

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def fingerprint(self) -> QueryFingerprint:
        return self._fingerprint

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def server_backed(self) -> bool:
        return self._client is not None and self._endpoint is not None

    def unmount(self) -> None:
        """Stop applying results; requests still pending are ignored."""
        self._mounted = False
        self._log.debug("coordinator_unmounted")

    def replace_items(self, items: Sequence[Item]) -> list[Item]:
        """Swap in a static item list and drop any server query.

        Returns:
            The normalized local list.
        """
        self._bump(endpoint=None, params=None)
        self._state = FetchState(total_pages=1, loaded=True)
        self._items = self._merger.normalize(items)
        return self._items

    async def set_query(self, endpoint: str, params: dict[str, Any] | None = None) -> bool:
        """Switch to a new query and load its first page.

        Any request issued under the previous query is invalidated.

        Returns:
            True if the first page was applied.
        """
        self.begin_query(endpoint, params)
        return await self.load_first_page()

    def begin_query(self, endpoint: str, params: dict[str, Any] | None = None) -> None:
        """Invalidate the previous query and reset pagination for a new one."""
        self._bump(endpoint=endpoint, params=params)
        self._state = FetchState()
        self._items = []
        self._log.debug(
            "query_changed",
            endpoint=endpoint,
            generation=self._fingerprint.generation,
        )

    async def load_first_page(self) -> bool:
        """(Re)load page 0 of the current query, replacing the local list.

        Returns:
            True if the page was applied, False if it failed or went stale.
        """
        if not self.server_backed or not self._mounted or self._state.in_flight:
            return False

        response = await self._request(0)
        if response is None:
            return False

        self._items = self._merger.normalize(response.content)
        self._state.page = 0
        total = response.total_pages if response.total_pages is not None else 1
        self._state.total_pages = max(1, total)
        self._state.loaded = True
        self._log.info(
            "first_page_loaded",
            endpoint=self._endpoint,
            items=len(self._items),
            total_pages=self._state.total_pages,
        )
        return True

    async def try_fetch_next(self, columns_remaining: int | None = None) -> int:
        """Fetch and merge the next page when it is needed.

        Args:
            columns_remaining: Columns the window can still reveal before
                the local end. None skips the near-end check (the caller
                already knows data is needed).

        Returns:
            Change in local item count (negative when the domain filter
            dropped more than the page added). 0 when nothing was fetched,
            which includes every call made before the first page loaded.
        """
        if not self.server_backed or not self._mounted:
            return 0
        if self._state.in_flight or not self._state.has_more:
            return 0
        # Page 0 has to resolve before any later page is requested
        if not self._state.loaded:
            return 0
        if columns_remaining is not None and columns_remaining > self.near_end_threshold:
            return 0

        next_page = self._state.page + 1
        response = await self._request(next_page)
        if response is None:
            return 0

        before = len(self._items)
        self._items = self._merger.merge(self._items, response.content)
        self._state.page = next_page
        if response.total_pages is not None:
            self._state.total_pages = max(1, response.total_pages)
        added = len(self._items) - before
        self._log.info(
            "page_merged",
            page=next_page,
            received=len(response.content),
            added=added,
            items=len(self._items),
            total_pages=self._state.total_pages,
        )
        return added

    def _bump(self, endpoint: str | None, params: dict[str, Any] | None) -> None:
        self._generation += 1
        self._endpoint = endpoint
        self._params = dict(params or {})
        self._fingerprint = QueryFingerprint(
            generation=self._generation,
            endpoint=endpoint,
            params_key=params_key(self._params),
        )

    def _is_current(self, fingerprint: QueryFingerprint) -> bool:
        return self._mounted and fingerprint == self._fingerprint

    async def _request(self, page: int) -> PageResponse | None:
        """Issue one page request under the current fingerprint.

        Returns:
            The response, or None if it failed or is no longer current.
        """
        if self._client is None or self._endpoint is None:
            return None
        fingerprint = self._fingerprint
        request_params = {**self._params, "page": page, "size": self.page_size}

        self._state.in_flight = True
        self._state.error = None
        self._state.error_category = None
        self._log.debug("page_fetch_started", endpoint=self._endpoint, page=page)

        try:
            response = await self._client.fetch_page(self._endpoint, request_params)
        except Exception as ex:
            category = classify_error(ex)
            if not self._is_current(fingerprint):
                self._log.debug(
                    "stale_page_fetch_failed",
                    page=page,
                    generation=fingerprint.generation,
                )
                return None
            self._state.error = self._error_message
            self._state.error_category = category
            self._log.warning(
                "page_fetch_failed",
                endpoint=fingerprint.endpoint,
                page=page,
                category=category.name,
                error=str(ex),
            )
            return None
        finally:
            # A stale request must not release the guard of the newer query
            if self._is_current(fingerprint):
                self._state.in_flight = False

        if not self._is_current(fingerprint):
            self._log.debug(
                "page_fetch_discarded",
                page=page,
                generation=fingerprint.generation,
                current_generation=self._fingerprint.generation,
            )
            return None
        return response
