"""Cooperative timers for a single-threaded game loop.

Nothing here sleeps or spawns threads.  The frontend advances the
``Scheduler`` once per frame (through ``FrameClock``) and due callbacks
run inline, in due-time order.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(order=True)
class TimerHandle:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    interval: float | None = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """A virtual clock with cancellable one-shot and repeating callbacks."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[TimerHandle] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for handle in self._queue if not handle.cancelled)

    # -- scheduling -----------------------------------------------------------

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self._now + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}.")
        handle = TimerHandle(
            self._now + interval, next(self._seq), callback, interval=interval
        )
        heapq.heappush(self._queue, handle)
        return handle

    def cancel(self, handle: TimerHandle | None) -> None:
        if handle is not None:
            handle.cancel()

    def cancel_all(self) -> None:
        for handle in self._queue:
            handle.cancel()
        self._queue.clear()

    # -- time -----------------------------------------------------------------

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due.

        Callbacks see ``now`` equal to their own due time, so anything
        they schedule is timed from the right moment.  Returns how many
        callbacks ran.
        """
        target = self._now + max(0.0, seconds)
        fired = 0
        while self._queue and self._queue[0].due <= target:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = handle.due
            if handle.interval is not None:
                handle.due += handle.interval
                handle.seq = next(self._seq)
                heapq.heappush(self._queue, handle)
            handle.callback()
            fired += 1
        self._now = target
        return fired


class FrameClock:
    """Feeds real elapsed time into a ``Scheduler``; can be paused."""

    def __init__(self, scheduler: Scheduler) -> None:
        self.scheduler = scheduler
        self._last: float = time.monotonic()
        self._running: bool = True

    def pump(self) -> int:
        """Advance the scheduler by the wall time since the previous pump."""
        now = time.monotonic()
        elapsed = now - self._last
        self._last = now
        if not self._running:
            return 0
        return self.scheduler.advance(elapsed)

    def pause(self) -> None:
        if self._running:
            self.pump()
            self._running = False

    def resume(self) -> None:
        if not self._running:
            self._last = time.monotonic()
            self._running = True

    @property
    def running(self) -> bool:
        return self._running
