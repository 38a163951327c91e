"""
Zoom, fullscreen and immersive display state of the page viewer.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from reader.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

MIN_SCALE = 0.5
MAX_SCALE = 3.0
SCALE_STEP = 0.25
DEFAULT_SCALE = 1.0

MOBILE_BREAKPOINT_PX = 768
MOBILE_PAGE_PADDING_PX = 32
MIN_MOBILE_PAGE_WIDTH_PX = 300

CONTROLS_AUTO_HIDE_SECONDS = 3.0
IMMERSIVE_HINT_SECONDS = 3.0


class FullscreenPort(Protocol):
    """Platform fullscreen capability. State changes come back through
    ViewModeController.on_fullscreen_change."""

    def request_fullscreen(self) -> None:
        ...

    def exit_fullscreen(self) -> None:
        ...


class ViewModeController:
    def __init__(
        self,
        scheduler: Scheduler,
        fullscreen: Optional[FullscreenPort] = None,
        container_width: float = 0.0,
    ):
        self._scheduler = scheduler
        self._fullscreen = fullscreen
        self.scale = DEFAULT_SCALE
        self.is_fullscreen = False
        self.is_mobile = False
        self.immersive_mode = False
        self.controls_visible = True
        self.hint_visible = False
        self.container_width = 0.0
        self._controls_timer: Optional[TimerHandle] = None
        self._hint_timer: Optional[TimerHandle] = None
        self.update_viewport(container_width)

    # -- layout -----------------------------------------------------------

    def update_viewport(self, container_width: float) -> None:
        self.container_width = max(container_width, 0.0)
        self.is_mobile = 0 < self.container_width < MOBILE_BREAKPOINT_PX
        if not self.is_mobile and self.immersive_mode:
            self.exit_immersive()

    def page_width(self) -> Optional[float]:
        """Width to render the page at, or None to render by scale."""
        if self.immersive_mode:
            return self.container_width
        if self.is_mobile:
            return max(
                self.container_width - MOBILE_PAGE_PADDING_PX,
                MIN_MOBILE_PAGE_WIDTH_PX,
            )
        return None

    def render_scale(self) -> Optional[float]:
        return None if self.is_mobile else self.scale

    # -- zoom -------------------------------------------------------------

    @property
    def can_zoom_in(self) -> bool:
        return not self.is_mobile and self.scale < MAX_SCALE

    @property
    def can_zoom_out(self) -> bool:
        return not self.is_mobile and self.scale > MIN_SCALE

    def zoom_in(self) -> bool:
        return self._set_scale(self.scale + SCALE_STEP)

    def zoom_out(self) -> bool:
        return self._set_scale(self.scale - SCALE_STEP)

    def reset_zoom(self) -> bool:
        return self._set_scale(DEFAULT_SCALE)

    def _set_scale(self, value: float) -> bool:
        if self.is_mobile:
            return False
        value = min(max(value, MIN_SCALE), MAX_SCALE)
        if value == self.scale:
            return False
        self.scale = value
        return True

    # -- fullscreen -------------------------------------------------------

    def toggle_fullscreen(self) -> None:
        if self._fullscreen is None:
            logger.warning("Fullscreen is not available on this surface")
            return
        try:
            if self.is_fullscreen:
                self._fullscreen.exit_fullscreen()
            else:
                self._fullscreen.request_fullscreen()
        except Exception:
            logger.exception("Fullscreen error")

    def on_fullscreen_change(self, active: bool) -> None:
        self.is_fullscreen = bool(active)

    # -- immersive mode and controls --------------------------------------

    def enter_immersive(self) -> bool:
        if not self.is_mobile or self.immersive_mode:
            return False
        self.immersive_mode = True
        self._cancel_controls_timer()
        self.controls_visible = False
        self.hint_visible = True
        self._cancel_hint_timer()
        self._hint_timer = self._scheduler.call_later(
            IMMERSIVE_HINT_SECONDS, self._dismiss_hint
        )
        return True

    def exit_immersive(self) -> bool:
        if not self.immersive_mode:
            return False
        self.immersive_mode = False
        self._cancel_hint_timer()
        self.hint_visible = False
        self._show_controls()
        return True

    def toggle_immersive(self) -> bool:
        if self.immersive_mode:
            return self.exit_immersive()
        return self.enter_immersive()

    def handle_long_press(self) -> None:
        """Peek controls in immersive mode; otherwise enter it (mobile)."""
        if self.immersive_mode:
            self._show_controls(force_auto_hide=True)
        elif self.is_mobile:
            self.enter_immersive()

    def toggle_controls(self) -> None:
        if self.controls_visible:
            self._cancel_controls_timer()
            self.controls_visible = False
        else:
            self._show_controls(force_auto_hide=self.immersive_mode)

    def notify_page_changed(self) -> None:
        if self.is_mobile and self.controls_visible:
            self._schedule_controls_hide()

    def cancel_timers(self) -> None:
        self._cancel_controls_timer()
        self._cancel_hint_timer()

    def _show_controls(self, force_auto_hide: bool = False) -> None:
        self.controls_visible = True
        if self.is_mobile or force_auto_hide:
            self._schedule_controls_hide()
        else:
            self._cancel_controls_timer()

    def _schedule_controls_hide(self) -> None:
        self._cancel_controls_timer()
        self._controls_timer = self._scheduler.call_later(
            CONTROLS_AUTO_HIDE_SECONDS, self._hide_controls
        )

    def _hide_controls(self) -> None:
        self._controls_timer = None
        self.controls_visible = False

    def _dismiss_hint(self) -> None:
        self._hint_timer = None
        self.hint_visible = False

    def _cancel_controls_timer(self) -> None:
        if self._controls_timer is not None:
            self._controls_timer.cancel()
            self._controls_timer = None

    def _cancel_hint_timer(self) -> None:
        if self._hint_timer is not None:
            self._hint_timer.cancel()
            self._hint_timer = None
