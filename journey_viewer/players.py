"""Sub-players: gallery, story scroller, reasons carousel.

Each player walks a cursor over its slice of the journey view on a timer
and calls on_complete exactly once when the slice is exhausted. An empty
slice completes synchronously inside start(). Timers for one cursor position
live in their own TimerScope, which is closed before the next position's
timer is armed, so a stale timer can never skip an item.
"""

from __future__ import annotations

import logging
from typing import Callable

from journey_viewer.models import LoveReason, MediaItem
from journey_viewer.timers import Scheduler, TimerScope
from journey_viewer.timings import Timings

logger = logging.getLogger(__name__)


class SubPlayer:
    """Cursor, per-position timer scope, and the once-only completion."""

    name = "player"

    def __init__(
        self,
        scheduler: Scheduler,
        timings: Timings,
        on_complete: Callable[[], None],
    ) -> None:
        self._scheduler = scheduler
        self._timings = timings
        self._on_complete = on_complete
        self._scope: TimerScope | None = None
        self.index = 0
        self.started = False
        self.completed = False
        self.stopped = False

    def start(self) -> None:
        if self.started:
            return
        self.started = True
        if self._length() == 0:
            logger.debug("%s has nothing to show", self.name)
            self._complete()
            return
        self._show(0)

    def stop(self) -> None:
        self.stopped = True
        self._clear()

    def _length(self) -> int:
        raise NotImplementedError

    def _show(self, index: int) -> None:
        raise NotImplementedError

    def _fresh_scope(self) -> TimerScope:
        self._clear()
        self._scope = TimerScope(self._scheduler, f"{self.name}[{self.index}]")
        return self._scope

    def _clear(self) -> None:
        if self._scope is not None:
            self._scope.close()
            self._scope = None

    def _complete(self) -> None:
        if self.completed or self.stopped:
            return
        self.completed = True
        self._clear()
        logger.debug("%s complete", self.name)
        self._on_complete()


# ---------------------------------------------------------------------------
# Gallery
# ---------------------------------------------------------------------------

class GalleryPlayer(SubPlayer):
    """Images for image_seconds each; videos until they end or hit the
    safety ceiling. The last item completes instead of wrapping."""

    name = "gallery"

    def __init__(
        self,
        items: list[MediaItem],
        scheduler: Scheduler,
        timings: Timings,
        on_complete: Callable[[], None],
    ) -> None:
        super().__init__(scheduler, timings, on_complete)
        self.items = list(items)

    @property
    def current(self) -> MediaItem | None:
        if self.completed or not self.items:
            return None
        return self.items[self.index]

    @property
    def progress(self) -> float:
        if not self.items:
            return 1.0
        return (self.index + 1) / len(self.items)

    def _length(self) -> int:
        return len(self.items)

    def _show(self, index: int) -> None:
        self.index = index
        item = self.items[index]
        delay = (
            self._timings.video_ceiling_seconds
            if item.kind == "video"
            else self._timings.image_seconds
        )
        self._fresh_scope().arm(delay, self._next)
        logger.debug("gallery showing %d/%d %s", index + 1, len(self.items), item.kind)

    def _next(self) -> None:
        if self.stopped or self.completed:
            return
        if self.index >= len(self.items) - 1:
            self._complete()
        else:
            self._show(self.index + 1)

    def video_ended(self, index: int) -> bool:
        """Playback of the video at index finished. Ignored unless it is the
        current item."""
        current = self.current
        if current is None or index != self.index or current.kind != "video":
            logger.debug("ignoring video ended for %d (current %d)", index, self.index)
            return False
        self._clear()
        self._next()
        return True


# ---------------------------------------------------------------------------
# Story scroller
# ---------------------------------------------------------------------------

def ease_in_out(progress: float) -> float:
    """Quadratic ease-in-out over [0, 1]."""
    if progress < 0.5:
        return 2 * progress * progress
    return 1 - ((-2 * progress + 2) ** 2) / 2


class StoryScroller(SubPlayer):
    """Scrolls the how-we-met text at reading pace.

    After a short lead-in the scroll runs for the text's reading time, eased
    in and out; at 100% it settles briefly and completes.
    """

    name = "story"

    def __init__(
        self,
        text: str,
        scheduler: Scheduler,
        timings: Timings,
        on_complete: Callable[[], None],
    ) -> None:
        super().__init__(scheduler, timings, on_complete)
        self.text = text
        self.duration = timings.reading_seconds(text)
        self._scroll_started_at: float | None = None

    def _length(self) -> int:
        return 1 if self.text.strip() else 0

    def _show(self, index: int) -> None:
        self._fresh_scope().arm(self._timings.story_lead_in_seconds, self._begin_scroll)

    def _begin_scroll(self) -> None:
        self._scroll_started_at = self._scheduler.time()
        self._fresh_scope().arm(self.duration, self._finish_scroll)

    def _finish_scroll(self) -> None:
        self.index = 1
        self._fresh_scope().arm(self._timings.story_settle_seconds, self._complete)

    def progress(self) -> float:
        """Linear reading progress in [0, 1]."""
        if self.completed or self.index >= 1:
            return 1.0
        if self._scroll_started_at is None:
            return 0.0
        elapsed = self._scheduler.time() - self._scroll_started_at
        return min(max(elapsed / self.duration, 0.0), 1.0)

    def scroll_fraction(self) -> float:
        """Eased scroll position in [0, 1]."""
        return ease_in_out(self.progress())


# ---------------------------------------------------------------------------
# Reasons carousel
# ---------------------------------------------------------------------------

class ReasonsCarousel(SubPlayer):
    """One reason per reason_seconds; after the last, a settle delay."""

    name = "reasons"

    def __init__(
        self,
        reasons: list[LoveReason],
        scheduler: Scheduler,
        timings: Timings,
        on_complete: Callable[[], None],
    ) -> None:
        super().__init__(scheduler, timings, on_complete)
        self.reasons = list(reasons)
        self.direction = 0  # +1 while sliding forward

    @property
    def current(self) -> LoveReason | None:
        if self.completed or not self.reasons:
            return None
        return self.reasons[self.index]

    def _length(self) -> int:
        return len(self.reasons)

    def _show(self, index: int) -> None:
        if index > self.index:
            self.direction = 1
        self.index = index
        self._fresh_scope().arm(self._timings.reason_seconds, self._next)

    def _next(self) -> None:
        if self.stopped or self.completed:
            return
        if self.index < len(self.reasons) - 1:
            self._show(self.index + 1)
        else:
            self._fresh_scope().arm(self._timings.reasons_settle_seconds, self._complete)
