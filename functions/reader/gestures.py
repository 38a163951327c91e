"""
Touch and mouse gesture classification for the page viewer.

``classify_gesture`` is a pure function over a finished ``GestureSample``;
``GestureTracker`` turns raw start/move/end events into samples and owns the
long-press timer.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import StrEnum
from functools import partial
from typing import Callable, Optional

from reader.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

SWIPE_THRESHOLD_PX = 50.0
JITTER_THRESHOLD_PX = 10.0
LONG_PRESS_SECONDS = 0.5
EDGE_ZONE_FRACTION = 0.3


class GestureKind(StrEnum):
    SWIPE_LEFT = "swipe-left"
    SWIPE_RIGHT = "swipe-right"
    TAP_LEFT_ZONE = "tap-left-zone"
    TAP_RIGHT_ZONE = "tap-right-zone"
    TAP_CENTER = "tap-center"
    LONG_PRESS = "long-press"


@dataclass(frozen=True)
class GestureSample:
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    surface_width: float
    long_press_fired: bool = False

    @property
    def dx(self) -> float:
        return self.end_x - self.start_x

    @property
    def dy(self) -> float:
        return self.end_y - self.start_y


def tap_zone(x: float, surface_width: float) -> GestureKind:
    if surface_width <= 0:
        return GestureKind.TAP_CENTER
    fraction = x / surface_width
    if fraction < EDGE_ZONE_FRACTION:
        return GestureKind.TAP_LEFT_ZONE
    if fraction > 1 - EDGE_ZONE_FRACTION:
        return GestureKind.TAP_RIGHT_ZONE
    return GestureKind.TAP_CENTER


def classify_gesture(sample: GestureSample) -> Optional[GestureKind]:
    """Classify one finished touch sequence.

    Returns None for drags that are neither taps nor horizontal swipes
    (vertical scrolling). Equal horizontal and vertical displacement counts
    as horizontal.
    """
    if sample.long_press_fired:
        return GestureKind.LONG_PRESS

    abs_dx = abs(sample.dx)
    abs_dy = abs(sample.dy)
    if abs_dx > SWIPE_THRESHOLD_PX and abs_dx >= abs_dy:
        # Finger travelling left pulls the next page in.
        return GestureKind.SWIPE_LEFT if sample.dx < 0 else GestureKind.SWIPE_RIGHT
    if abs_dx < SWIPE_THRESHOLD_PX:
        return tap_zone(sample.start_x, sample.surface_width)
    return None


class GestureTracker:
    """Feeds raw pointer events through the classifier.

    A long-press is emitted the moment its timer fires; the touch-end that
    follows emits nothing. Moving more than the jitter threshold on either
    axis disarms the timer.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_gesture: Callable[[GestureKind], None],
        surface_width: float = 0.0,
        long_press_seconds: float = LONG_PRESS_SECONDS,
    ):
        self._scheduler = scheduler
        self._on_gesture = on_gesture
        self.surface_width = surface_width
        self._long_press_seconds = long_press_seconds
        self._lock = threading.Lock()
        self._start: Optional[tuple[float, float]] = None
        self._last: Optional[tuple[float, float]] = None
        self._timer: Optional[TimerHandle] = None
        self._long_press_fired = False
        self._sequence = 0

    @property
    def active(self) -> bool:
        return self._start is not None

    def touch_start(self, x: float, y: float) -> None:
        with self._lock:
            self._cancel_timer()
            self._sequence += 1
            self._start = (x, y)
            self._last = (x, y)
            self._long_press_fired = False
            self._timer = self._scheduler.call_later(
                self._long_press_seconds,
                partial(self._fire_long_press, self._sequence),
            )

    def touch_move(self, x: float, y: float) -> None:
        with self._lock:
            if self._start is None:
                return
            self._last = (x, y)
            start_x, start_y = self._start
            if (
                abs(x - start_x) > JITTER_THRESHOLD_PX
                or abs(y - start_y) > JITTER_THRESHOLD_PX
            ):
                self._cancel_timer()

    def touch_end(
        self, x: Optional[float] = None, y: Optional[float] = None
    ) -> Optional[GestureKind]:
        with self._lock:
            if self._start is None:
                return None
            self._cancel_timer()
            if x is not None and y is not None:
                self._last = (x, y)
            fired = self._long_press_fired
            sample = GestureSample(
                start_x=self._start[0],
                start_y=self._start[1],
                end_x=self._last[0],
                end_y=self._last[1],
                surface_width=self.surface_width,
            )
            self._reset()
        if fired:
            return None
        kind = classify_gesture(sample)
        if kind is not None:
            logger.debug("Gesture %s (dx=%.1f dy=%.1f)", kind, sample.dx, sample.dy)
            self._on_gesture(kind)
        return kind

    def touch_cancel(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._reset()

    # Mouse input follows the same path as a single touch point.
    mouse_down = touch_start
    mouse_move = touch_move
    mouse_up = touch_end

    def _fire_long_press(self, sequence: int) -> None:
        with self._lock:
            if sequence != self._sequence or self._start is None or self._timer is None:
                return
            self._timer = None
            self._long_press_fired = True
        self._on_gesture(GestureKind.LONG_PRESS)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reset(self) -> None:
        self._start = None
        self._last = None
        self._long_press_fired = False
