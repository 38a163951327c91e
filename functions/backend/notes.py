"""
Per-page notes attached to library documents.

Anyone can read notes; only signed-in users can write them and only the
author can edit or delete one.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from backend.db import DbClient
from shared.errors import (
    AuthorizationError,
    NotAuthenticatedError,
    NotFoundError,
    ServiceError,
)
from shared.types import AuthUser, Note, NoteWithDocument, utcnow
from shared.validation import check_page_number, clean_note_content

logger = logging.getLogger(__name__)


@dataclass
class NotesService:
    db: DbClient

    def create_note(
        self,
        user: Optional[AuthUser],
        document_id: str,
        page_number: int,
        content: str,
    ) -> Note:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to create notes")
        content = clean_note_content(content)
        check_page_number(page_number)
        if self.db.get_pdf(document_id) is None:
            raise NotFoundError("PDF not found")

        now = utcnow()
        try:
            note = self.db.create_note(
                Note(
                    id=uuid.uuid4().hex,
                    document_id=document_id,
                    user_id=user.id,
                    page_number=page_number,
                    content=content,
                    created_at=now,
                    updated_at=now,
                )
            )
        except Exception as exc:
            logger.error("Failed to save note on %s p.%s: %s", document_id, page_number, exc)
            raise ServiceError("Failed to save note") from exc
        logger.info("User %s added note %s on %s p.%s", user.id, note.id, document_id, page_number)
        return note

    def update_note(self, user: Optional[AuthUser], note_id: str, content: str) -> Note:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to update notes")
        content = clean_note_content(content)
        self._owned_note(user, note_id, "You can only edit your own notes")
        try:
            updated = self.db.update_note(note_id, content, utcnow())
        except Exception as exc:
            logger.error("Failed to update note %s: %s", note_id, exc)
            raise ServiceError("Failed to update note") from exc
        if updated is None:
            raise NotFoundError("Note not found")
        return updated

    def delete_note(self, user: Optional[AuthUser], note_id: str) -> None:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to delete notes")
        self._owned_note(user, note_id, "You can only delete your own notes")
        try:
            self.db.delete_note(note_id)
        except Exception as exc:
            logger.error("Failed to delete note %s: %s", note_id, exc)
            raise ServiceError("Failed to delete note") from exc

    def _owned_note(self, user: AuthUser, note_id: str, message: str) -> Note:
        note = self.db.get_note(note_id)
        if note is None:
            raise NotFoundError("Note not found")
        if note.user_id != user.id:
            raise AuthorizationError(message)
        return note

    def notes_for_page(self, document_id: str, page_number: int) -> list[Note]:
        check_page_number(page_number)
        return self.db.list_notes(pdf_id=document_id, page_number=page_number)

    def all_notes(
        self, document_id: Optional[str] = None, search: Optional[str] = None
    ) -> list[NoteWithDocument]:
        notes = self.db.list_notes(pdf_id=document_id or None, search=search or None)
        documents: dict = {}
        results = []
        for note in notes:
            if note.document_id not in documents:
                documents[note.document_id] = self.db.get_pdf(note.document_id)
            document = documents[note.document_id]
            # Inner-join semantics: notes whose document is gone are hidden.
            if document is None:
                continue
            results.append(
                NoteWithDocument(
                    note=note,
                    document_title=document.title,
                    document_description=document.description,
                )
            )
        return results

    def documents_with_notes(self) -> list[dict]:
        """Distinct documents that have at least one note, most recent note first."""
        seen: dict[str, dict] = {}
        for item in self.all_notes():
            if item.note.document_id not in seen:
                seen[item.note.document_id] = {
                    "id": item.note.document_id,
                    "title": item.document_title,
                }
        return list(seen.values())

    def for_user(self, user: Optional[AuthUser]) -> "UserNotesBackend":
        return UserNotesBackend(self, user)


@dataclass
class UserNotesBackend:
    """Binds the service to one acting user so a viewer overlay can call it directly."""

    service: NotesService
    user: Optional[AuthUser]

    def list_notes(self, document_id: str, page_number: int) -> list[Note]:
        return self.service.notes_for_page(document_id, page_number)

    def create_note(self, document_id: str, page_number: int, content: str) -> Note:
        return self.service.create_note(self.user, document_id, page_number, content)

    def update_note(self, note_id: str, content: str) -> Note:
        return self.service.update_note(self.user, note_id, content)

    def delete_note(self, note_id: str) -> None:
        self.service.delete_note(self.user, note_id)
