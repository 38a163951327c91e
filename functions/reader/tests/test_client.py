import unittest
from unittest.mock import MagicMock

import requests
from fastapi.testclient import TestClient

from backend.app import create_app
from backend.context import AppContext
from reader.client import ApiClient
from reader.notes_overlay import NotesOverlay
from reader.scheduling import ManualScheduler
from reader.viewer import ViewerSession
from shared.errors import (
    AuthorizationError,
    InvalidInputError,
    NotAuthenticatedError,
    ServiceError,
)
from shared.types import PdfDocument, ReadingSession


class ApiClientIntegrationTests(unittest.TestCase):
    """Drives the real routes through FastAPI's TestClient."""

    def setUp(self):
        self.context = AppContext.in_memory()
        http = TestClient(create_app(self.context))
        owner = self.context.auth.add_user("owner@example.com", "pw", user_id="owner")
        other = self.context.auth.add_user("other@example.com", "pw", user_id="other")
        self.context.db.create_pdf(
            PdfDocument(id="doc", title="Doc", file_path="library/doc.pdf", user_id="owner")
        )
        self.client = ApiClient(
            "http://testserver", self.context.auth.issue_token(owner), session=http
        )
        self.other = ApiClient(
            "http://testserver", self.context.auth.issue_token(other), session=http
        )
        self.anonymous = ApiClient("http://testserver", session=http)

    def test_progress_roundtrip(self):
        self.client.upsert_progress(ReadingSession("owner", "doc", 3, 9))
        self.assertEqual(self.client.get_progress("doc")["current_page"], 3)
        self.assertEqual(self.context.db.get_progress("owner", "doc").current_page, 3)

    def test_notes_crud(self):
        note = self.client.create_note("doc", 2, "hello")
        self.assertEqual(note.page_number, 2)
        self.assertEqual([n.id for n in self.client.list_notes("doc", 2)], [note.id])
        updated = self.client.update_note(note.id, "changed")
        self.assertEqual(updated.content, "changed")
        self.assertGreaterEqual(updated.updated_at, note.updated_at)
        self.client.delete_note(note.id)
        self.assertEqual(self.client.list_notes("doc", 2), [])

    def test_errors_map_to_exceptions(self):
        note = self.client.create_note("doc", 1, "mine")
        with self.assertRaises(AuthorizationError) as ctx:
            self.other.update_note(note.id, "theirs")
        self.assertEqual(ctx.exception.message, "You can only edit your own notes")
        with self.assertRaises(NotAuthenticatedError):
            self.anonymous.delete_note(note.id)
        with self.assertRaises(InvalidInputError):
            self.client.create_note("doc", 1, "   ")

    def test_viewer_against_api(self):
        scheduler = ManualScheduler()
        viewer = ViewerSession(
            "doc",
            "owner",
            self.client,
            scheduler=scheduler,
            notes_backend=self.client,
            initial_page=1,
        )
        viewer.on_document_loaded(5)
        viewer.go_to_next()
        viewer.go_to_next()
        scheduler.advance(3.0)
        self.assertEqual(self.context.db.get_progress("owner", "doc").current_page, 3)

        viewer.notes.open()
        viewer.notes.create("page three")
        viewer.close()
        overlay = NotesOverlay(self.other, "doc", page_number=3)
        self.assertEqual([n.content for n in overlay.open()], ["page three"])


class ApiClientTransportTests(unittest.TestCase):
    def test_connection_errors_become_service_errors(self):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("refused")
        client = ApiClient("http://nowhere.test", "tok", session=session)
        with self.assertLogs("reader.client", level="ERROR"):
            with self.assertRaises(ServiceError):
                client.list_notes("doc", 1)

    def test_server_errors_hide_details(self):
        response = MagicMock()
        response.status_code = 502
        response.json.return_value = {"detail": "upstream exploded"}
        session = MagicMock()
        session.request.return_value = response
        client = ApiClient("http://nowhere.test/", session=session)
        with self.assertLogs("reader.client", level="ERROR"):
            with self.assertRaises(ServiceError) as ctx:
                client.delete_note("n1")
        self.assertEqual(ctx.exception.message, "Something went wrong. Please try again.")
        url = session.request.call_args[0][1]
        self.assertEqual(url, "http://nowhere.test/api/notes/n1")


if __name__ == "__main__":
    unittest.main()
