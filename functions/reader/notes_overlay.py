"""
Page-scoped notes list shown over the viewer.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from shared.errors import AppError
from shared.types import Note
from shared.validation import check_page_number, clean_note_content

logger = logging.getLogger(__name__)


class NotesBackend(Protocol):
    def list_notes(self, document_id: str, page_number: int) -> list[Note]:
        ...

    def create_note(self, document_id: str, page_number: int, content: str) -> Note:
        ...

    def update_note(self, note_id: str, content: str) -> Note:
        ...

    def delete_note(self, note_id: str) -> None:
        ...


class NotesOverlay:
    """Notes for the active page only.

    The list is dropped on every page change; while the overlay is open it is
    fetched again for the new page. Mutations validate locally first and let
    authorization failures from the backend propagate to the caller.
    """

    def __init__(self, backend: NotesBackend, document_id: str, page_number: int = 1):
        self.backend = backend
        self.document_id = document_id
        self.page_number = check_page_number(page_number)
        self.is_open = False
        self.notes: list[Note] = []
        self.error: Optional[str] = None

    def open(self) -> list[Note]:
        self.is_open = True
        return self.refresh()

    def close(self) -> None:
        self.is_open = False

    def on_page_changed(self, page_number: int) -> None:
        self.page_number = check_page_number(page_number)
        self.notes = []
        self.error = None
        if self.is_open:
            self.refresh()

    def refresh(self) -> list[Note]:
        try:
            self.notes = self.backend.list_notes(self.document_id, self.page_number)
            self.error = None
        except AppError as exc:
            logger.error(
                "Error fetching notes for %s page %s: %s",
                self.document_id,
                self.page_number,
                exc,
            )
            self.notes = []
            self.error = exc.message
        return self.notes

    def create(self, content: str) -> Note:
        cleaned = clean_note_content(content)
        note = self.backend.create_note(self.document_id, self.page_number, cleaned)
        if note.page_number == self.page_number:
            self.notes.insert(0, note)
        return note

    def update(self, note_id: str, content: str) -> Note:
        cleaned = clean_note_content(content)
        updated = self.backend.update_note(note_id, cleaned)
        self.notes = [updated if n.id == note_id else n for n in self.notes]
        return updated

    def delete(self, note_id: str) -> None:
        self.backend.delete_note(note_id)
        self.notes = [n for n in self.notes if n.id != note_id]
