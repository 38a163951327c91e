"""
Debounced persistence of reading progress.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from reader.debounce import TrailingDebouncer
from reader.scheduling import Scheduler
from shared.constants import PROGRESS_DEBOUNCE_SECONDS
from shared.types import ReadingSession, utcnow

logger = logging.getLogger(__name__)


class ProgressStore(Protocol):
    def upsert_progress(self, session: ReadingSession) -> None:
        ...


class ProgressRecorder:
    """Coalesce page changes into infrequent upserts of a ReadingSession.

    Only the last page recorded in a quiet window is written. Writes are
    best effort: a failed upsert is logged and dropped, never retried.
    """

    def __init__(
        self,
        store: ProgressStore,
        user_id: str,
        document_id: str,
        scheduler: Scheduler,
        wait: float = PROGRESS_DEBOUNCE_SECONDS,
        clock: Callable = utcnow,
    ):
        self.store = store
        self.user_id = user_id
        self.document_id = document_id
        self._clock = clock
        self._debouncer = TrailingDebouncer(self._write, wait, scheduler)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def record_page(self, page: int, total_pages: int) -> None:
        self._debouncer(page, total_pages)

    def flush(self) -> bool:
        return self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()

    def _write(self, page: int, total_pages: int) -> None:
        try:
            session = ReadingSession(
                user_id=self.user_id,
                document_id=self.document_id,
                current_page=page,
                total_pages=total_pages,
                last_read_at=self._clock(),
            )
            self.store.upsert_progress(session)
        except Exception:
            logger.exception(
                "Failed to save progress for document %s (page %s/%s)",
                self.document_id,
                page,
                total_pages,
            )
