"""
Trailing debounce with a forced flush.
"""

from __future__ import annotations

import threading
from functools import partial
from typing import Any, Callable, Optional

from reader.scheduling import Scheduler, TimerHandle


class TrailingDebouncer:
    """Delay calls to ``func`` until ``wait`` seconds pass without a new call.

    Each call replaces the pending arguments and restarts the quiet window, so
    only the most recent arguments reach ``func``. ``flush()`` runs a pending
    call immediately on the caller's thread.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        wait: float,
        scheduler: Scheduler,
    ):
        if wait < 0:
            raise ValueError("wait must be >= 0")
        self._func = func
        self._wait = wait
        self._scheduler = scheduler
        self._lock = threading.Lock()
        self._pending: Optional[tuple[tuple, dict]] = None
        self._handle: Optional[TimerHandle] = None
        # Bumped on every reschedule so a timer that already started cannot
        # fire a newer call early.
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            self._pending = (args, kwargs)
            self._handle = self._scheduler.call_later(
                self._wait, partial(self._fire, self._generation)
            )

    def flush(self) -> bool:
        """Run the pending call now. Returns False when nothing was pending."""
        pending = self._take()
        if pending is None:
            return False
        args, kwargs = pending
        self._func(*args, **kwargs)
        return True

    def cancel(self) -> None:
        self._take()

    def _take(self) -> Optional[tuple[tuple, dict]]:
        with self._lock:
            pending = self._pending
            if self._handle is not None:
                self._handle.cancel()
            self._handle = None
            self._pending = None
            self._generation += 1
            return pending

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._pending is None:
                return
            args, kwargs = self._pending
            self._pending = None
            self._handle = None
        self._func(*args, **kwargs)
