import unittest
from datetime import timedelta
from unittest.mock import patch

from backend.db import InMemoryDbClient
from backend.notes import NotesService
from reader.notes_overlay import NotesOverlay
from shared.errors import (
    AuthorizationError,
    InvalidInputError,
    NotAuthenticatedError,
    NotFoundError,
    ServiceError,
)
from shared.types import AuthUser, PdfDocument


class NotesServiceTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.service = NotesService(self.db)
        self.alice = AuthUser(id="alice", email="alice@example.com")
        self.bob = AuthUser(id="bob")
        self.db.create_pdf(
            PdfDocument(id="pdf-1", title="Deep Work", description="Focus",
                        file_path="library/a.pdf", user_id="alice")
        )
        self.db.create_pdf(
            PdfDocument(id="pdf-2", title="SICP", file_path="library/b.pdf", user_id="alice")
        )

    def test_create_trims_content(self):
        note = self.service.create_note(self.alice, "pdf-1", 3, "  hello  ")
        self.assertEqual(note.content, "hello")
        self.assertEqual(note.user_id, "alice")
        self.assertEqual(note.page_number, 3)

    def test_create_requires_sign_in(self):
        with self.assertRaises(NotAuthenticatedError) as ctx:
            self.service.create_note(None, "pdf-1", 1, "x")
        self.assertEqual(ctx.exception.message, "You must be signed in to create notes")

    def test_create_validates_before_writing(self):
        with self.assertRaises(InvalidInputError):
            self.service.create_note(self.alice, "pdf-1", 1, "   ")
        with self.assertRaises(InvalidInputError):
            self.service.create_note(self.alice, "pdf-1", 1, "x" * 5001)
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.create_note(self.alice, "pdf-1", 0, "x")
        self.assertEqual(ctx.exception.message, "Invalid page number")
        self.assertEqual(self.db.notes, {})

    def test_create_accepts_exactly_max_length(self):
        note = self.service.create_note(self.alice, "pdf-1", 1, "x" * 5000)
        self.assertEqual(len(note.content), 5000)

    def test_create_on_missing_document(self):
        with self.assertRaises(NotFoundError):
            self.service.create_note(self.alice, "nope", 1, "x")

    def test_update_by_owner_advances_updated_at(self):
        note = self.service.create_note(self.alice, "pdf-1", 1, "first")
        self.db.notes[note.id].updated_at = note.updated_at - timedelta(seconds=10)
        updated = self.service.update_note(self.alice, note.id, " second ")
        self.assertEqual(updated.content, "second")
        self.assertGreater(updated.updated_at, note.updated_at - timedelta(seconds=10))

    def test_non_owner_cannot_update_or_delete(self):
        note = self.service.create_note(self.alice, "pdf-1", 1, "mine")
        with self.assertRaises(AuthorizationError) as ctx:
            self.service.update_note(self.bob, note.id, "hijack")
        self.assertEqual(ctx.exception.message, "You can only edit your own notes")
        with self.assertRaises(AuthorizationError):
            self.service.delete_note(self.bob, note.id)
        stored = self.db.get_note(note.id)
        self.assertEqual(stored.content, "mine")

    def test_delete_missing_note(self):
        with self.assertRaises(NotFoundError):
            self.service.delete_note(self.alice, "missing")

    def test_notes_for_page_newest_first(self):
        first = self.service.create_note(self.alice, "pdf-1", 2, "first")
        second = self.service.create_note(self.bob, "pdf-1", 2, "second")
        self.service.create_note(self.alice, "pdf-1", 3, "other page")
        notes = self.service.notes_for_page("pdf-1", 2)
        self.assertEqual([n.id for n in notes], [second.id, first.id])

    def test_all_notes_with_filter_and_search(self):
        self.service.create_note(self.alice, "pdf-1", 1, "Deliberate practice")
        self.service.create_note(self.alice, "pdf-2", 1, "Lambda calculus")
        everything = self.service.all_notes()
        self.assertEqual(len(everything), 2)
        self.assertEqual(everything[0].document_title, "SICP")

        filtered = self.service.all_notes(document_id="pdf-1")
        self.assertEqual([n.document_title for n in filtered], ["Deep Work"])
        self.assertEqual(filtered[0].document_description, "Focus")

        searched = self.service.all_notes(search="LAMBDA")
        self.assertEqual([n.note.content for n in searched], ["Lambda calculus"])

    def test_documents_with_notes_are_deduplicated(self):
        self.service.create_note(self.alice, "pdf-1", 1, "a")
        self.service.create_note(self.alice, "pdf-2", 1, "b")
        self.service.create_note(self.alice, "pdf-1", 2, "c")
        documents = self.service.documents_with_notes()
        self.assertEqual(documents, [{"id": "pdf-1", "title": "Deep Work"},
                                     {"id": "pdf-2", "title": "SICP"}])

    def test_overlay_over_user_backend(self):
        overlay = NotesOverlay(self.service.for_user(self.alice), "pdf-1", page_number=4)
        overlay.open()
        self.assertEqual(overlay.notes, [])
        note = overlay.create("  from overlay ")
        self.assertEqual(overlay.notes, [note])
        self.assertEqual(self.service.notes_for_page("pdf-1", 4)[0].content, "from overlay")

        bob_overlay = NotesOverlay(self.service.for_user(self.bob), "pdf-1", page_number=4)
        bob_overlay.open()
        with self.assertRaises(AuthorizationError):
            bob_overlay.delete(note.id)
        self.assertIsNotNone(self.db.get_note(note.id))

class NotesServiceFailureTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.service = NotesService(self.db)
        self.user = AuthUser(id="alice")
        self.db.create_pdf(
            PdfDocument(id="pdf-1", title="Deep Work", file_path="library/a.pdf", user_id="alice")
        )

    def test_create_failure_is_logged_and_generic(self):
        with patch.object(self.db, "create_note", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.notes", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.create_note(self.user, "pdf-1", 1, "hello")
        self.assertEqual(ctx.exception.message, "Failed to save note")
        self.assertEqual(self.db.list_notes(pdf_id="pdf-1"), [])

    def test_update_failure_leaves_note_unchanged(self):
        note = self.service.create_note(self.user, "pdf-1", 1, "before")
        with patch.object(self.db, "update_note", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.notes", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.update_note(self.user, note.id, "after")
        self.assertEqual(ctx.exception.message, "Failed to update note")
        self.assertEqual(self.db.get_note(note.id).content, "before")

    def test_delete_failure_is_reported(self):
        note = self.service.create_note(self.user, "pdf-1", 1, "keep")
        with patch.object(self.db, "delete_note", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.notes", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.delete_note(self.user, note.id)
        self.assertEqual(ctx.exception.message, "Failed to delete note")
        self.assertIsNotNone(self.db.get_note(note.id))



if __name__ == "__main__":
    unittest.main()
