"""Seamlessly looping hero banner.

N slides are rendered as ``[last, *slides, first]``. Navigation animates
onto a neighbouring node; when that node is one of the two clones, the
transition-end handler disables the transition and snaps to the matching
real slide, and the next frame turns the transition back on. The user
sees an endless loop while only N + 2 nodes exist.
"""

import asyncio
from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from carousel_engine.core.config import DEFAULT_BANNER_INTERVAL, Settings
from carousel_engine.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class InfiniteBannerCursor(Generic[T]):
    """Index bookkeeping for a cloned-edge looping banner."""

    def __init__(self, slides: Sequence[T]) -> None:
        self._slides: list[T] = list(slides)
        self.index = 1
        self.transition_enabled = True
        self.animating = False
        self.hovered = False
        self.focused = False

    @property
    def slides(self) -> list[T]:
        return self._slides

    @property
    def slide_count(self) -> int:
        return len(self._slides)

    @property
    def rendered(self) -> list[T]:
        """Nodes to render: the real slides framed by the two clones."""
        if not self._slides:
            return []
        return [self._slides[-1], *self._slides, self._slides[0]]

    @property
    def has_carousel(self) -> bool:
        return len(self._slides) >= 2

    @property
    def paused(self) -> bool:
        return self.hovered or self.focused

    @property
    def real_index(self) -> int:
        """Position of the visible slide within the real slides."""
        if not self._slides:
            return 0
        return (self.index - 1) % len(self._slides)

    @property
    def current(self) -> T | None:
        if not self._slides:
            return None
        return self._slides[self.real_index]

    def offset(self, width: float) -> float:
        """Track offset for a frame of the given width."""
        return -self.index * max(1.0, width)

    def next(self) -> bool:
        """Animate to the following slide. Returns False if ignored."""
        return self._go(1)

    def prev(self) -> bool:
        """Animate to the preceding slide. Returns False if ignored."""
        return self._go(-1)

    def on_transition_end(self) -> None:
        """Finish an animation, snapping off a clone if we landed on one."""
        self.animating = False
        count = len(self._slides)
        if count == 0:
            return
        if self.index == count + 1:
            self.transition_enabled = False
            self.index = 1
        elif self.index == 0:
            self.transition_enabled = False
            self.index = count

    def on_frame(self) -> None:
        """Re-enable the transition one frame after a snap."""
        self.transition_enabled = True

    def tick(self) -> bool:
        """Auto-advance step; skipped while paused or mid-animation."""
        if self.paused or self.animating:
            return False
        return self.next()

    def set_slides(self, slides: Sequence[T]) -> bool:
        """Replace the slides and rewind to the first one.

        Returns:
            True if the slide count changed.
        """
        changed = len(slides) != len(self._slides)
        self._slides = list(slides)
        self.index = 1
        self.animating = False
        self.transition_enabled = True
        return changed

    def _go(self, direction: int) -> bool:
        if not self.has_carousel or self.animating:
            return False
        self.transition_enabled = True
        self.animating = True
        self.index += direction
        return True


class BannerAutoplay(Generic[T]):
    """Ticks a banner cursor on a fixed interval from an asyncio task."""

    def __init__(
        self,
        cursor: InfiniteBannerCursor[T],
        interval: float = DEFAULT_BANNER_INTERVAL,
        on_tick: Callable[[InfiniteBannerCursor[T]], None] | None = None,
    ) -> None:
        """Initialize autoplay.

        Args:
            cursor: The banner to advance.
            interval: Seconds between ticks.
            on_tick: Called after every tick that moved the banner, so the
                shell can start the transition.
        """
        self.cursor = cursor
        self.interval = interval
        self._on_tick = on_tick
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cursor: InfiniteBannerCursor[T],
        on_tick: Callable[[InfiniteBannerCursor[T]], None] | None = None,
    ) -> "BannerAutoplay[T]":
        return cls(cursor, interval=settings.banner_interval, on_tick=on_tick)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """(Re)start the interval. Banners with fewer than 2 slides never tick."""
        self.stop()
        if not self.cursor.has_carousel:
            return
        self._task = asyncio.create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def set_slides(self, slides: Sequence[T]) -> None:
        """Swap slides; the interval restarts when the count changed."""
        if self.cursor.set_slides(slides):
            logger.debug("banner_slides_changed", slides=len(slides))
            self.start()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self.cursor.tick() and self._on_tick is not None:
                self._on_tick(self.cursor)
