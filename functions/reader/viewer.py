"""
One open document in the PDF viewer.

Wires the navigator, gesture tracker, view modes, notes overlay and the
debounced progress writer together. Input events go in through the methods
below; the current ``ViewerState`` comes out through ``state``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from reader.document import DocumentLoadError, count_pages
from reader.gestures import GestureKind, GestureTracker
from reader.navigation import PageNavigator
from reader.notes_overlay import NotesBackend, NotesOverlay
from reader.progress import ProgressRecorder, ProgressStore
from reader.scheduling import Scheduler, ThreadingScheduler
from reader.view_mode import FullscreenPort, ViewModeController
from shared.constants import PROGRESS_DEBOUNCE_SECONDS
from shared.types import AuthEvent, AuthEventKind

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load PDF. Please try again."


@dataclass(frozen=True)
class ViewerState:
    current_page: int
    total_pages: int
    percent: float
    scale: float
    is_fullscreen: bool
    is_mobile: bool
    immersive_mode: bool
    controls_visible: bool
    hint_visible: bool
    is_loading: bool
    error: Optional[str]


class ViewerSession:
    def __init__(
        self,
        document_id: str,
        user_id: str,
        progress_store: ProgressStore,
        scheduler: Optional[Scheduler] = None,
        notes_backend: Optional[NotesBackend] = None,
        initial_page: int = 1,
        container_width: float = 0.0,
        fullscreen: Optional[FullscreenPort] = None,
        debounce_seconds: float = PROGRESS_DEBOUNCE_SECONDS,
    ):
        self.document_id = document_id
        self.user_id = user_id
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.RLock()
        self.is_loading = True
        self.error: Optional[str] = None
        self.closed = False
        self._unsubscribe_auth: Optional[Callable[[], None]] = None

        self.navigator = PageNavigator(current_page=max(initial_page or 1, 1))
        self.view_mode = ViewModeController(
            self._scheduler, fullscreen=fullscreen, container_width=container_width
        )
        self.progress = ProgressRecorder(
            progress_store,
            user_id=user_id,
            document_id=document_id,
            scheduler=self._scheduler,
            wait=debounce_seconds,
        )
        self.gestures = GestureTracker(
            self._scheduler, self.handle_gesture, surface_width=container_width
        )
        self.notes: Optional[NotesOverlay] = None
        if notes_backend is not None:
            self.notes = NotesOverlay(
                notes_backend, document_id, self.navigator.current_page
            )
        self.navigator.subscribe(self._on_page_changed)

    @property
    def state(self) -> ViewerState:
        with self._lock:
            return ViewerState(
                current_page=self.navigator.current_page,
                total_pages=self.navigator.total_pages,
                percent=self.navigator.percent,
                scale=self.view_mode.scale,
                is_fullscreen=self.view_mode.is_fullscreen,
                is_mobile=self.view_mode.is_mobile,
                immersive_mode=self.view_mode.immersive_mode,
                controls_visible=self.view_mode.controls_visible,
                hint_visible=self.view_mode.hint_visible,
                is_loading=self.is_loading,
                error=self.error,
            )

    # -- document lifecycle -------------------------------------------------

    def load_document(self, pdf_bytes: bytes) -> bool:
        try:
            total = count_pages(pdf_bytes)
        except DocumentLoadError as exc:
            self.on_document_load_failed(exc)
            return False
        self.on_document_loaded(total)
        return True

    def on_document_loaded(self, total_pages: int) -> None:
        with self._lock:
            self.navigator.set_total_pages(total_pages)
            self.is_loading = False
            self.error = None
            self.progress.record_page(self.navigator.current_page, total_pages)

    def on_document_load_failed(self, exc: Exception) -> None:
        logger.error("Error loading PDF %s: %s", self.document_id, exc)
        with self._lock:
            self.is_loading = False
            self.error = LOAD_FAILED_MESSAGE

    def resize(self, container_width: float) -> None:
        with self._lock:
            self.view_mode.update_viewport(container_width)
            self.gestures.surface_width = container_width

    def close(self) -> None:
        """Unmount: persist the final position and stop all timers."""
        with self._lock:
            if self.closed:
                return
            self.closed = True
            self.gestures.touch_cancel()
            self.view_mode.cancel_timers()
            if self._unsubscribe_auth is not None:
                self._unsubscribe_auth()
                self._unsubscribe_auth = None
        self.progress.flush()

    def bind_auth_events(self, bus) -> None:
        """Close the session when its user signs out elsewhere."""
        self._unsubscribe_auth = bus.subscribe(self._on_auth_event)

    def _on_auth_event(self, event: AuthEvent) -> None:
        if event.kind == AuthEventKind.SIGNED_OUT and event.user_id == self.user_id:
            logger.info("User %s signed out; closing viewer", self.user_id)
            self.close()

    # -- navigation ---------------------------------------------------------

    def go_to_next(self) -> bool:
        with self._lock:
            if self.closed:
                return False
            return self.navigator.go_to_next()

    def go_to_previous(self) -> bool:
        with self._lock:
            if self.closed:
                return False
            return self.navigator.go_to_previous()

    def jump_to(self, page: int) -> bool:
        with self._lock:
            if self.closed:
                return False
            return self.navigator.jump_to(page)

    def _on_page_changed(self, page: int, _previous: int) -> None:
        if self.navigator.is_loaded:
            self.progress.record_page(page, self.navigator.total_pages)
        self.view_mode.notify_page_changed()
        if self.notes is not None:
            self.notes.on_page_changed(page)

    # -- input --------------------------------------------------------------

    def touch_start(self, x: float, y: float) -> None:
        self.gestures.touch_start(x, y)

    def touch_move(self, x: float, y: float) -> None:
        self.gestures.touch_move(x, y)

    def touch_end(self, x: Optional[float] = None, y: Optional[float] = None):
        return self.gestures.touch_end(x, y)

    def handle_gesture(self, kind: GestureKind) -> None:
        with self._lock:
            if self.closed:
                return
            if kind == GestureKind.SWIPE_LEFT:
                self.navigator.go_to_next()
            elif kind == GestureKind.SWIPE_RIGHT:
                self.navigator.go_to_previous()
            elif kind == GestureKind.TAP_LEFT_ZONE:
                if self.navigator.can_go_previous:
                    self.navigator.go_to_previous()
            elif kind == GestureKind.TAP_RIGHT_ZONE:
                if self.navigator.can_go_next:
                    self.navigator.go_to_next()
            elif kind == GestureKind.TAP_CENTER:
                self.view_mode.toggle_controls()
            elif kind == GestureKind.LONG_PRESS:
                self.view_mode.handle_long_press()

    # -- view modes -----------------------------------------------------------

    def zoom_in(self) -> bool:
        with self._lock:
            return self.view_mode.zoom_in()

    def zoom_out(self) -> bool:
        with self._lock:
            return self.view_mode.zoom_out()

    def reset_zoom(self) -> bool:
        with self._lock:
            return self.view_mode.reset_zoom()

    def toggle_fullscreen(self) -> None:
        self.view_mode.toggle_fullscreen()

    def on_fullscreen_change(self, active: bool) -> None:
        with self._lock:
            self.view_mode.on_fullscreen_change(active)

    def exit_immersive(self) -> bool:
        with self._lock:
            return self.view_mode.exit_immersive()
