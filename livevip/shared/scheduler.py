"""
Timer scheduling capability.

All timed effects of a viewing session (catalog poll, watch clock, synthetic
comments, control auto-hide, pause auto-resume, navigation guard) go through a
`Scheduler`. Every timer returns a `TimerHandle` whose `cancel()` takes effect
synchronously: a cancelled handle never invokes its callback again, even if the
underlying task has not been torn down yet.

Two implementations:
- `AsyncioScheduler`: real time, one asyncio task per timer.
- `ManualScheduler`: virtual time advanced explicitly, for deterministic tests
  and simulations.
"""

from __future__ import annotations

import asyncio
import heapq
import inspect
import itertools
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from loguru import logger

from .utils import format_error

TimerCallback = Callable[[], Any]


class TimerHandle:
    """Handle to a scheduled one-shot or repeating timer."""

    def __init__(self, name: str, *, repeating: bool = False):
        self.name = name
        self.repeating = repeating
        self._cancelled = False
        self._finished = False

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._finished)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def _finish(self) -> None:
        self._finished = True

    def __repr__(self) -> str:
        state = "active" if self.active else ("cancelled" if self._cancelled else "finished")
        return f"<TimerHandle {self.name} {state}>"


async def _invoke(callback: TimerCallback, name: str) -> None:
    """Run a timer callback, awaiting it when it is a coroutine. Errors are logged, not raised."""
    try:
        result = callback()
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error("Timer callback {} failed: {}", name, format_error(e))


class Scheduler(ABC):
    """Scheduling capability injected into the viewing session."""

    def __init__(self) -> None:
        self._handles: set[TimerHandle] = set()
        self._closed = False

    @abstractmethod
    def now(self) -> float:
        """Monotonic clock in seconds."""

    @abstractmethod
    def call_later(self, delay: float, callback: TimerCallback, *, name: str) -> TimerHandle:
        """Invoke `callback` once after `delay` seconds."""

    @abstractmethod
    def call_every(self, interval: float, callback: TimerCallback, *, name: str) -> TimerHandle:
        """Invoke `callback` every `interval` seconds until cancelled."""

    def spawn(self, callback: TimerCallback, *, name: str) -> TimerHandle:
        """Run `callback` in the background as soon as possible."""
        return self.call_later(0, callback, name=name)

    @property
    def pending(self) -> list[TimerHandle]:
        return [handle for handle in self._handles if handle.active]

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()

    async def aclose(self) -> None:
        self._closed = True
        self.cancel_all()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Scheduler is closed")


class _TaskTimerHandle(TimerHandle):
    def __init__(self, name: str, *, repeating: bool = False):
        super().__init__(name, repeating=repeating)
        self.task: asyncio.Task | None = None

    def cancel(self) -> None:
        super().cancel()
        if self.task is None or self.task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # A timer cancelling itself from its own callback just stops looping.
        if self.task is not current:
            self.task.cancel()


class AsyncioScheduler(Scheduler):
    """Real-time scheduler backed by asyncio tasks."""

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: TimerCallback, *, name: str) -> TimerHandle:
        self._check_open()
        handle = _TaskTimerHandle(name)

        async def _run():
            try:
                await asyncio.sleep(max(0.0, delay))
                if handle.active:
                    await _invoke(callback, name)
            except asyncio.CancelledError:
                pass
            finally:
                handle._finish()
                self._handles.discard(handle)

        self._handles.add(handle)
        handle.task = asyncio.create_task(_run(), name=f"timer:{name}")
        return handle

    def call_every(self, interval: float, callback: TimerCallback, *, name: str) -> TimerHandle:
        self._check_open()
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        handle = _TaskTimerHandle(name, repeating=True)

        async def _loop():
            try:
                while handle.active:
                    await asyncio.sleep(interval)
                    if not handle.active:
                        break
                    await _invoke(callback, name)
            except asyncio.CancelledError:
                pass
            finally:
                handle._finish()
                self._handles.discard(handle)

        self._handles.add(handle)
        handle.task = asyncio.create_task(_loop(), name=f"timer:{name}")
        return handle

    async def aclose(self) -> None:
        tasks = [
            handle.task
            for handle in self._handles
            if isinstance(handle, _TaskTimerHandle) and handle.task is not None
        ]
        await super().aclose()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("Scheduler closed, {} task(s) torn down", len(tasks))


class ManualScheduler(Scheduler):
    """Virtual-time scheduler: nothing fires until `advance()` is awaited."""

    def __init__(self, start: float = 0.0):
        super().__init__()
        self._now = float(start)
        self._queue: list[tuple[float, int, TimerHandle, TimerCallback, float | None]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def _push(self, due: float, handle: TimerHandle, callback: TimerCallback, interval: float | None):
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback, interval))

    def call_later(self, delay: float, callback: TimerCallback, *, name: str) -> TimerHandle:
        self._check_open()
        handle = TimerHandle(name)
        self._handles.add(handle)
        self._push(self._now + max(0.0, delay), handle, callback, None)
        return handle

    def call_every(self, interval: float, callback: TimerCallback, *, name: str) -> TimerHandle:
        self._check_open()
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        handle = TimerHandle(name, repeating=True)
        self._handles.add(handle)
        self._push(self._now + interval, handle, callback, interval)
        return handle

    async def advance(self, seconds: float) -> None:
        """Move virtual time forward, firing every timer that comes due, in order."""
        target = self._now + max(0.0, seconds)
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback, interval = heapq.heappop(self._queue)
            if not handle.active:
                self._handles.discard(handle)
                continue
            self._now = max(self._now, due)
            if interval is None:
                handle._finish()
                self._handles.discard(handle)
            await _invoke(callback, handle.name)
            if interval is not None and handle.active:
                self._push(due + interval, handle, callback, interval)
        self._now = target

    async def run_pending(self) -> None:
        """Fire everything already due without moving time."""
        await self.advance(0)

    def cancel_all(self) -> None:
        super().cancel_all()
        self._queue.clear()
