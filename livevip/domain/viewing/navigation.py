"""Directional navigation across the eligible stream list."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from loguru import logger

from livevip.schemas import StreamRecord
from livevip.shared.scheduler import Scheduler, TimerHandle

from .viewing_models import TimerKey

SWIPE_MIN_VERTICAL_PX = 50
SWIPE_MAX_HORIZONTAL_PX = 100


class NavigationDirection(str, Enum):
    NEXT = "next"
    PREV = "prev"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Point:
    x: float
    y: float


def classify_gesture(
    start: Point,
    end: Point,
    *,
    min_vertical: float = SWIPE_MIN_VERTICAL_PX,
    max_horizontal: float = SWIPE_MAX_HORIZONTAL_PX,
) -> NavigationDirection | None:
    """Classify a swipe.

    Only mostly-vertical swipes navigate: `|dy| > min_vertical` and
    `dx < max_horizontal`, with `dy = start.y - end.y`. Swiping up (dy > 0)
    goes to the next stream, swiping down to the previous one.
    """
    dy = start.y - end.y
    dx = abs(start.x - end.x)
    if abs(dy) > min_vertical and dx < max_horizontal:
        return NavigationDirection.NEXT if dy > 0 else NavigationDirection.PREV
    return None


class NavigationController:
    """Moves the selection along the eligible list, one transition at a time.

    While a transition is in flight (`transitioning`), further commands are
    ignored until the guard timer clears it.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_select: Callable[[StreamRecord], Any],
        *,
        guard_seconds: float = 0.3,
        min_vertical: float = SWIPE_MIN_VERTICAL_PX,
        max_horizontal: float = SWIPE_MAX_HORIZONTAL_PX,
    ):
        self.scheduler = scheduler
        self.on_select = on_select
        self.guard_seconds = guard_seconds
        self.min_vertical = min_vertical
        self.max_horizontal = max_horizontal

        self.streams: list[StreamRecord] = []
        self.index: int | None = None
        self.transitioning = False
        self._guard: TimerHandle | None = None

    def sync(self, streams: list[StreamRecord], index: int | None) -> None:
        """Adopt the eligible list and index computed by the viewing session."""
        self.streams = list(streams)
        if index is not None and not 0 <= index < len(self.streams):
            index = None
        self.index = index

    @property
    def has_next(self) -> bool:
        return self.index is not None and self.index < len(self.streams) - 1

    @property
    def has_prev(self) -> bool:
        return self.index is not None and self.index > 0

    @property
    def position_label(self) -> str | None:
        """1-based position such as "2 of 5", None when nothing is selected."""
        if self.index is None:
            return None
        return f"{self.index + 1} of {len(self.streams)}"

    def next(self) -> StreamRecord | None:
        if self.transitioning or not self.has_next:
            return None
        return self._go(self.index + 1)

    def prev(self) -> StreamRecord | None:
        if self.transitioning or not self.has_prev:
            return None
        return self._go(self.index - 1)

    def move(self, direction: NavigationDirection) -> StreamRecord | None:
        return self.next() if direction == NavigationDirection.NEXT else self.prev()

    def handle_gesture(self, start: Point, end: Point) -> StreamRecord | None:
        direction = classify_gesture(
            start,
            end,
            min_vertical=self.min_vertical,
            max_horizontal=self.max_horizontal,
        )
        if direction is None:
            return None
        return self.move(direction)

    def cancel_transition(self) -> None:
        if self._guard is not None:
            self._guard.cancel()
            self._guard = None
        self.transitioning = False

    def reset(self) -> None:
        self.cancel_transition()
        self.streams = []
        self.index = None

    def _go(self, index: int) -> StreamRecord:
        target = self.streams[index]
        self.transitioning = True
        if self._guard is not None:
            self._guard.cancel()
        self._guard = self.scheduler.call_later(
            self.guard_seconds, self._end_transition, name=str(TimerKey.NAVIGATION_GUARD)
        )
        logger.debug("Navigating to stream {} ({})", target.id, index)
        self.on_select(target)
        return target

    def _end_transition(self) -> None:
        self.transitioning = False
        self._guard = None
