"""Headless carousel combining geometry, bucketing, window and pagination.

The UI shell forwards container resizes and navigation input, then renders
whatever view() returns. All item state lives in the FetchCoordinator; this
class keeps the bucketed columns and the window in sync with it.

Example:
    carousel = Carousel(flash_sale_options(), client=catalog_client)
    await carousel.mount()
    carousel.resize(1280)
    await carousel.step_forward()
    view = carousel.view()
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Hashable, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from carousel_engine.core.bucketing import bucketize
from carousel_engine.core.carousel_logic import WindowCursor, WindowState
from carousel_engine.core.config import DEFAULT_FETCH_ERROR_MESSAGE, Settings
from carousel_engine.core.fetch_coordinator import FetchCoordinator, FetchState
from carousel_engine.core.geometry import Geometry, GeometryResolver, GeometrySpec
from carousel_engine.core.items import Item, item_key, normalize_item
from carousel_engine.core.logging import get_logger
from carousel_engine.core.navigation import Step, key_to_step, wheel_to_step
from carousel_engine.core.page_merger import DomainFilter, DomainSort, PageMerger

if TYPE_CHECKING:
    from carousel_engine.ports.catalog import CatalogListingClient

logger = get_logger(__name__)


@dataclass
class CarouselOptions:
    """Render contract of a carousel.

    Either ``items`` (static) or ``endpoint`` (server-backed) provides the
    data; static items win when both are given.

    Attributes:
        name: Identifier used in log lines.
        rows: Items stacked in each column.
        visible_columns: Columns visible at once.
        loop: Wrap to the first column after the last one.
        gap: Space between columns.
        padding_x: Horizontal frame padding on each side.
        min_column_width: Column width floor for narrow viewports.
        near_end_threshold: Columns from the local end that trigger a
            background prefetch of the next page.
        page_size: Items requested per server page. None uses
            rows * visible_columns.
        domain_filter: Predicate applied to the merged item list.
        domain_sort: Reordering applied after the filter.
        key_fn: Stable identity of an item.
        wheel_navigation: Whether pointer-wheel events move the window.
        endpoint: Listing endpoint for server-backed carousels.
        params: Domain query parameters sent with every page request.
        items: Static items (mappings are normalized on the way in).
        unmeasured_width: Width assumed before the container is laid out.
        empty_hint: Line shown when a loaded carousel has no items.
        error_message: Line shown when a page fetch fails.
    """

    name: str = "carousel"
    rows: int = 1
    visible_columns: int = 6
    loop: bool = False
    gap: int = 16
    padding_x: int = 8
    min_column_width: int = 150
    near_end_threshold: int = 0
    page_size: int | None = None
    domain_filter: DomainFilter | None = None
    domain_sort: DomainSort | None = None
    key_fn: Callable[[Item], Hashable | None] = item_key
    wheel_navigation: bool = False
    endpoint: str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    items: Sequence[Item | dict[str, Any]] = field(default_factory=list)
    unmeasured_width: int | None = None
    empty_hint: str | None = None
    error_message: str = DEFAULT_FETCH_ERROR_MESSAGE

    @property
    def effective_page_size(self) -> int:
        if self.page_size is not None:
            return max(1, self.page_size)
        return max(1, self.rows * self.visible_columns)

    def with_settings(self, settings: Settings) -> CarouselOptions:
        """Copy of these options using the page-wide error message."""
        return replace(self, error_message=settings.fetch_error_message)


@dataclass(frozen=True)
class Skeleton:
    """Placeholder cell rendered while the first page is loading."""

    id: str


@dataclass
class CarouselView:
    """Everything a shell needs to render one frame of a carousel."""

    columns: list[list[Item | Skeleton]]
    column_width: int
    frame_width: int
    translate_x: int
    start_index: int
    visible_columns: int
    total_columns: int
    show_prev: bool
    can_next: bool
    disable_next: bool
    loading: bool
    error: str | None = None
    retryable: bool = False
    empty_hint: str | None = None


class Carousel:
    """One carousel instance: owns its list, window and fetch state."""

    def __init__(
        self,
        options: CarouselOptions,
        client: CatalogListingClient | None = None,
    ) -> None:
        self.options = options
        self.rows = max(1, int(options.rows))
        self.visible_columns = max(1, int(options.visible_columns))
        self._log = logger.bind(carousel=options.name)

        self._geometry = GeometryResolver(
            GeometrySpec(
                columns=self.visible_columns,
                gap=options.gap,
                padding_x=options.padding_x,
                min_column_width=options.min_column_width,
            ),
            unmeasured_width=options.unmeasured_width,
        )
        self._merger: PageMerger[Item] = PageMerger(
            key_fn=options.key_fn,
            domain_filter=options.domain_filter,
            domain_sort=options.domain_sort,
        )
        self._coordinator = FetchCoordinator(
            client,
            self._merger,
            page_size=options.effective_page_size,
            near_end_threshold=options.near_end_threshold,
            error_message=options.error_message,
            name=options.name,
        )
        self._cursor = WindowCursor(loop=options.loop)
        self._window = WindowState(start_index=0, visible_columns=self.visible_columns)
        self._columns: list[list[Item]] = []
        self._client = client
        self._tasks: set[asyncio.Task[Any]] = set()
        self._mounted = False

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[Item]:
        return self._coordinator.items

    @property
    def columns(self) -> list[list[Item]]:
        return self._columns

    @property
    def window(self) -> WindowState:
        return self._window

    @property
    def fetch_state(self) -> FetchState:
        return self._coordinator.state

    @property
    def geometry(self) -> Geometry:
        return self._geometry.geometry

    @property
    def coordinator(self) -> FetchCoordinator:
        return self._coordinator

    @property
    def fetch_aware(self) -> bool:
        return self._coordinator.server_backed

    @property
    def translate_x(self) -> int:
        return self._cursor.translate_offset(
            self._window, self.geometry.column_width, self.options.gap
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def mount(self) -> None:
        """Populate the carousel from static items or the first server page."""
        self._mounted = True
        if self.options.items or self._client is None or not self.options.endpoint:
            self.set_items(self.options.items)
            return
        await self.set_query(self.options.endpoint, self.options.params)

    async def unmount(self) -> None:
        """Stop applying state from requests that are still pending."""
        self._mounted = False
        self._coordinator.unmount()
        self._log.debug("carousel_unmounted", pending_tasks=len(self._tasks))

    async def settle(self) -> None:
        """Wait for background prefetches started by navigation."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def set_items(self, items: Sequence[Item | dict[str, Any]]) -> None:
        """Replace the item set wholesale with a static list."""
        normalized = [normalize_item(raw) for raw in items]
        self._coordinator.replace_items(normalized)
        self._rebucket(reset=True)

    async def set_query(self, endpoint: str, params: dict[str, Any] | None = None) -> None:
        """Point the carousel at a new listing query and load its first page.

        A carousel that was never mounted is mounted by its first query; one
        that was unmounted stays unmounted and sends no request.
        """
        if not self._mounted and self._coordinator.mounted:
            self._mounted = True
        self._coordinator.begin_query(endpoint, params)
        self._rebucket(reset=True)
        await self._reload_first_page()

    async def retry(self) -> int:
        """Explicit retry after a failed fetch."""
        if not self._coordinator.state.loaded:
            await self._reload_first_page()
            return len(self.items)
        added = await self._coordinator.try_fetch_next()
        self._rebucket()
        return added

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def resize(self, container_width: float) -> Geometry:
        """Recompute geometry for a new container width; the window only clamps."""
        geometry = self._geometry.observe(container_width)
        self._window = self._cursor.resize(self._window, len(self._columns))
        return geometry

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def step_forward(self) -> WindowState:
        """Advance one column, fetching more data when the window nears the end."""
        window = self._window
        if self.fetch_aware and not self._coordinator.state.loaded:
            return await self._reload_first_page()

        if window.can_step_forward:
            remaining = window.columns_remaining
            self._window = self._cursor.step_forward(window)
            if self.fetch_aware:
                self._spawn(self._prefetch(remaining))
            return self._window

        if self.fetch_aware and self._coordinator.state.has_more:
            if self._coordinator.state.in_flight:
                return self._window
            fingerprint = self._coordinator.fingerprint
            added = await self._coordinator.try_fetch_next()
            # The query may have changed while the page was in flight
            if not self._mounted or self._coordinator.fingerprint != fingerprint:
                return self._window
            self._rebucket()
            if self._coordinator.state.error is not None:
                return self._window
            if added > 0 and self._window.can_step_forward:
                self._window = self._cursor.step_forward(self._window)
                return self._window

        self._window = self._cursor.step_forward(self._window)
        return self._window

    def step_backward(self) -> WindowState:
        """Go back one column."""
        self._window = self._cursor.step_backward(self._window)
        return self._window

    async def step(self, step: Step) -> WindowState:
        if step is Step.FORWARD:
            return await self.step_forward()
        return self.step_backward()

    async def handle_key(self, key: str) -> WindowState:
        """Arrow-key navigation; other keys are ignored."""
        step = key_to_step(key)
        if step is None:
            return self._window
        return await self.step(step)

    async def handle_wheel(self, delta_x: float, delta_y: float) -> WindowState:
        """Pointer-wheel navigation, when enabled for this carousel."""
        if not self.options.wheel_navigation:
            return self._window
        step = wheel_to_step(delta_x, delta_y)
        if step is None:
            return self._window
        return await self.step(step)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def view(self) -> CarouselView:
        """Snapshot of what to render right now."""
        state = self._coordinator.state
        geometry = self.geometry
        loading = state.in_flight
        first_load = loading and not self.items

        columns: list[list[Item | Skeleton]]
        if first_load:
            skeletons = [
                Skeleton(id=f"sk-{i}")
                for i in range(self._coordinator.page_size)
            ]
            columns = bucketize(skeletons, self.rows)
        else:
            columns = [list(col) for col in self._columns]

        can_next = (
            self._window.can_step_forward
            or (self.fetch_aware and state.has_more and state.error is None)
            or (self.options.loop and bool(self._columns))
        )
        empty_hint = None
        if not loading and not self.items and state.loaded:
            empty_hint = self.options.empty_hint

        return CarouselView(
            columns=columns,
            column_width=geometry.column_width,
            frame_width=geometry.frame_width,
            translate_x=self.translate_x,
            start_index=self._window.start_index,
            visible_columns=self._window.visible_columns,
            total_columns=self._window.total_columns,
            show_prev=self._window.can_step_back,
            can_next=can_next,
            disable_next=first_load,
            loading=loading,
            error=state.error,
            retryable=state.retryable,
            empty_hint=empty_hint,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _rebucket(self, reset: bool = False) -> None:
        self._columns = bucketize(self._coordinator.items, self.rows)
        if reset:
            self._window = self._cursor.reset(self._window, len(self._columns))
        else:
            self._window = self._cursor.resize(self._window, len(self._columns))

    async def _reload_first_page(self) -> WindowState:
        if self._coordinator.state.in_flight:
            return self._window
        fingerprint = self._coordinator.fingerprint
        applied = await self._coordinator.load_first_page()
        if applied and self._mounted and self._coordinator.fingerprint == fingerprint:
            self._rebucket(reset=True)
        return self._window

    async def _prefetch(self, columns_remaining: int) -> None:
        fingerprint = self._coordinator.fingerprint
        await self._coordinator.try_fetch_next(columns_remaining)
        if self._mounted and self._coordinator.fingerprint == fingerprint:
            self._rebucket()

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
