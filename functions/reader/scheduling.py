"""
Timer abstraction for the reading core.

The viewer logic only needs "call this later" and "what time is it". Real
sessions use threading timers; tests drive a virtual clock instead.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    def now(self) -> float:
        ...


class ThreadingScheduler:
    """Runs callbacks on daemon threading.Timer threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer

    def now(self) -> float:
        return time.monotonic()


@dataclass
class _ManualTimer:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Virtual clock for tests. Nothing runs until advance() is called."""

    current: float = 0.0
    _queue: list = field(default_factory=list)
    _seq: itertools.count = field(default_factory=itertools.count)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(due=self.current + max(delay, 0.0), callback=callback)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    def now(self) -> float:
        return self.current

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every timer that comes due.

        Callbacks may schedule further timers; those run too if they fall
        inside the window. Returns the number of callbacks run.
        """
        target = self.current + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.current = due
            timer.callback()
            ran += 1
        self.current = target
        return ran
