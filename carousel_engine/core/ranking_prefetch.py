"""Hover prefetch of detail records for ranking lists.

Ranking rows only carry an id. Hovering or focusing a row prefetches the
item's detail record so that a click can route to the canonical slug
without a loading flash. Prefetching is best-effort: failures are logged and
a click simply falls back to the id-based route.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol

from carousel_engine.core.config import DEFAULT_DETAIL_CACHE_TTL, Settings
from carousel_engine.core.items import Item, as_number, as_text
from carousel_engine.core.logging import get_logger
from carousel_engine.core.navigation import Step, key_to_step

if TYPE_CHECKING:
    from carousel_engine.ports.catalog import CatalogDetailClient

logger = get_logger(__name__)

DetailKey = int | str
UNCATEGORIZED = "Other"


@dataclass
class CacheEntry:
    """A cached detail record.

    Attributes:
        value: The detail record.
        fetched_at: When the record was fetched.
    """

    value: Item
    fetched_at: datetime


class DetailCache(Protocol):
    """Protocol for detail record caches.

    The cache is owned by the page or session scope and injected, so every
    test can start from an empty one.
    """

    def get(self, key: DetailKey) -> CacheEntry | None:
        """Return the entry for key, fresh or not, or None."""
        ...

    def set(self, key: DetailKey, entry: CacheEntry) -> None:
        """Store an entry, replacing any previous one."""
        ...


class InMemoryDetailCache:
    """In-memory detail cache.

    Suitable for a single page session. Entries are lost on reload.
    """

    def __init__(self) -> None:
        self._entries: dict[DetailKey, CacheEntry] = {}

    def get(self, key: DetailKey) -> CacheEntry | None:
        return self._entries.get(key)

    def set(self, key: DetailKey, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def utc_now() -> datetime:
    return datetime.now(UTC)


class RankingPrefetcher:
    """Prefetches detail records on hover and routes clicks."""

    def __init__(
        self,
        client: CatalogDetailClient,
        cache: DetailCache,
        *,
        ttl_seconds: float = DEFAULT_DETAIL_CACHE_TTL,
        navigate: Callable[[str], None] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the prefetcher.

        Args:
            client: Detail lookup client.
            cache: Cache shared with the rest of the page.
            ttl_seconds: How long a cached record counts as fresh.
            navigate: Called with the route when a row is opened.
            clock: Time source, injectable for tests.
        """
        self._client = client
        self._cache = cache
        self._ttl = timedelta(seconds=ttl_seconds)
        self._navigate = navigate
        self._clock = clock
        self._in_flight: dict[DetailKey, asyncio.Task[Item | None]] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: CatalogDetailClient,
        cache: DetailCache,
        *,
        navigate: Callable[[str], None] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> RankingPrefetcher:
        return cls(
            client,
            cache,
            ttl_seconds=settings.detail_cache_ttl,
            navigate=navigate,
            clock=clock,
        )

    def is_fresh(self, item_id: DetailKey) -> bool:
        entry = self._cache.get(item_id)
        if entry is None:
            return False
        return self._clock() - entry.fetched_at < self._ttl

    def is_in_flight(self, item_id: DetailKey) -> bool:
        return item_id in self._in_flight

    def on_hover(self, item_id: DetailKey) -> asyncio.Task[Item | None] | None:
        """Start a prefetch unless a fresh or pending record exists.

        Returns:
            The new prefetch task, or None if nothing was started.
        """
        if self.is_fresh(item_id) or self.is_in_flight(item_id):
            return None
        return self._start(item_id)

    on_focus = on_hover

    async def prefetch(self, item_id: DetailKey) -> Item | None:
        """Return a fresh record, fetching it (once) if needed."""
        if self.is_fresh(item_id):
            entry = self._cache.get(item_id)
            return entry.value if entry is not None else None
        task = self._in_flight.get(item_id) or self._start(item_id)
        return await task

    def cached(self, item_id: DetailKey) -> Item | None:
        """Cached record for item_id, even if stale."""
        entry = self._cache.get(item_id)
        return entry.value if entry is not None else None

    def route_for(self, item_id: DetailKey) -> str:
        """Route for a row: the canonical slug if known, else the id."""
        detail = self.cached(item_id)
        if detail is not None and detail.slug:
            return f"/books/{detail.slug}"
        return f"/books/id/{item_id}"

    def open(self, item_id: DetailKey) -> str:
        """Navigate to a row's route and return it."""
        route = self.route_for(item_id)
        if self._navigate is not None:
            self._navigate(route)
        return route

    async def settle(self) -> None:
        """Wait for pending prefetches."""
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight.values()))

    def _start(self, item_id: DetailKey) -> asyncio.Task[Item | None]:
        task = asyncio.create_task(self._fetch(item_id))
        self._in_flight[item_id] = task
        task.add_done_callback(lambda _: self._in_flight.pop(item_id, None))
        return task

    async def _fetch(self, item_id: DetailKey) -> Item | None:
        try:
            detail = await self._client.fetch_detail(item_id)
        except Exception as ex:
            logger.debug("detail_prefetch_failed", item_id=item_id, error=str(ex))
            return None
        self._cache.set(item_id, CacheEntry(value=detail, fetched_at=self._clock()))
        logger.debug("detail_prefetched", item_id=item_id, slug=detail.slug)
        return detail


# =============================================================================
# Ranking board
# =============================================================================


@dataclass(frozen=True)
class RankingRow:
    """One row of a top-selling ranking."""

    item_id: DetailKey
    title: str | None
    category: str
    sold: int
    rank: int | None = None
    image: str | None = None
    growth_percent: float | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


def to_ranking_row(raw: Mapping[str, Any], category: str | None = None) -> RankingRow | None:
    """Build a RankingRow; rows without an id are dropped."""
    item_id = raw.get("bookId", raw.get("id"))
    if isinstance(item_id, bool) or not isinstance(item_id, (int, str)):
        return None
    sold = as_number(raw.get("sold"))
    rank = as_number(raw.get("rank"))
    return RankingRow(
        item_id=item_id,
        title=as_text(raw.get("title")),
        category=category or as_text(raw.get("category")) or UNCATEGORIZED,
        sold=int(sold) if sold is not None else 0,
        rank=int(rank) if rank is not None else None,
        image=as_text(raw.get("imageUrl")),
        growth_percent=as_number(raw.get("growthPercent")),
        raw=dict(raw),
    )


def group_rankings(data: Any) -> dict[str, list[RankingRow]]:
    """Group ranking payloads by category.

    Accepts either a flat list of rows (grouped by their ``category``) or a
    mapping of category to rows. Anything else yields no groups.
    """
    groups: dict[str, list[RankingRow]] = {}
    if isinstance(data, list):
        for raw in data:
            if not isinstance(raw, Mapping):
                continue
            row = to_ranking_row(raw)
            if row is not None:
                groups.setdefault(row.category, []).append(row)
    elif isinstance(data, Mapping):
        for category, rows in data.items():
            if not isinstance(rows, list):
                continue
            for raw in rows:
                row = raw if isinstance(raw, RankingRow) else None
                if row is None and isinstance(raw, Mapping):
                    row = to_ranking_row(raw, category=str(category))
                if row is not None:
                    groups.setdefault(str(category), []).append(row)
    return groups


def order_categories(groups: Mapping[str, Sequence[RankingRow]]) -> list[str]:
    """Non-empty categories, best selling first, ties by name."""
    non_empty = [(name, rows) for name, rows in groups.items() if rows]
    non_empty.sort(key=lambda pair: (-sum(row.sold for row in pair[1]), pair[0]))
    return [name for name, _ in non_empty]


class RankingBoard:
    """Category tabs over ranking rows, with hover prefetch.

    The first row of the active category is prefetched as soon as the
    category becomes active, since it is the one previewed by default.
    """

    def __init__(self, prefetcher: RankingPrefetcher, data: Any = None) -> None:
        self._prefetcher = prefetcher
        self._groups: dict[str, list[RankingRow]] = {}
        self.categories: list[str] = []
        self.active_category: str | None = None
        self.hover_id: DetailKey | None = None
        if data is not None:
            self.load(data)

    @property
    def rows(self) -> list[RankingRow]:
        if self.active_category is None:
            return []
        return self._groups.get(self.active_category, [])

    def load(self, data: Any) -> None:
        """Replace the rankings and activate the best-selling category."""
        self._groups = group_rankings(data)
        self.categories = order_categories(self._groups)
        self.active_category = None
        self.hover_id = None
        if self.categories:
            self.select(self.categories[0])

    def select(self, category: str) -> None:
        """Activate a category and preview its first row."""
        if category not in self._groups:
            return
        self.active_category = category
        self.hover_id = None
        if self.rows:
            self.hover(self.rows[0].item_id)

    def handle_key(self, key: str) -> str | None:
        """Cycle categories with the arrow keys, wrapping at both ends."""
        step = key_to_step(key)
        if step is None or not self.categories:
            return self.active_category
        current = (
            self.categories.index(self.active_category)
            if self.active_category in self.categories
            else 0
        )
        offset = 1 if step is Step.FORWARD else -1
        self.select(self.categories[(current + offset) % len(self.categories)])
        return self.active_category

    def hover(self, item_id: DetailKey) -> None:
        self.hover_id = item_id
        self._prefetcher.on_hover(item_id)

    def open(self, item_id: DetailKey) -> str:
        return self._prefetcher.open(item_id)
