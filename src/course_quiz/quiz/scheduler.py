"""Cancellable delayed callbacks used for the answer reveal interval."""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, Protocol

__all__ = [
    "ScheduledTask",
    "Scheduler",
    "ManualScheduler",
]

Callback = Callable[[], None]


class ScheduledTask(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        """Run ``callback`` once after ``delay`` seconds."""


class _ManualTask:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler driven by :meth:`advance`.

    Used by the console runner, which sleeps through the reveal itself, and
    by tests that need exact control over when callbacks fire.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._counter = itertools.count()
        self._queue: list[tuple[float, int, _ManualTask, Callback]] = []

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        task = _ManualTask()
        heapq.heappush(
            self._queue,
            (self._now + max(0.0, delay), next(self._counter), task, callback),
        )
        return task

    def pending(self) -> int:
        return sum(1 for _, _, task, _ in self._queue if not task.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every callback now due."""

        self._now += max(0.0, seconds)
        fired = 0
        while self._queue and self._queue[0][0] <= self._now:
            _, _, task, callback = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            callback()
            fired += 1
        return fired
