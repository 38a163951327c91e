import io
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from pypdf import PdfWriter

from backend.app import create_app
from backend.context import AppContext
from shared.types import AuthEventKind, PdfDocument


def make_pdf(pages: int) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.context = AppContext.in_memory()
        self.client = TestClient(create_app(self.context))
        self.context.auth.add_user("owner@example.com", "pw", user_id="owner")
        self.context.auth.add_user("other@example.com", "pw", user_id="other")
        self.headers = self._sign_in("owner@example.com")
        self.other_headers = self._sign_in("other@example.com")

    def _sign_in(self, email):
        response = self.client.post(
            "/api/auth/sign-in", json={"email": email, "password": "pw"}
        )
        self.assertEqual(response.status_code, 200)
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def _create_pdf(self, title="Book"):
        response = self.client.post(
            "/api/library",
            json={"file_path": "library/1-book.pdf", "title": title},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_health(self):
        self.assertEqual(self.client.get("/api/health").json(), {"status": "ok"})

    def test_auth_user_and_sign_out(self):
        me = self.client.get("/api/auth/user", headers=self.headers).json()
        self.assertEqual(me["user"]["id"], "owner")
        self.assertIsNone(self.client.get("/api/auth/user").json()["user"])

        received = []
        self.context.auth_events.subscribe(received.append)
        response = self.client.post("/api/auth/sign-out", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(received[0].kind, AuthEventKind.SIGNED_OUT)
        self.assertIsNone(self.client.get("/api/auth/user", headers=self.headers).json()["user"])

    def test_bad_sign_in_is_401(self):
        response = self.client.post(
            "/api/auth/sign-in", json={"email": "owner@example.com", "password": "x"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Invalid email or password")

    def test_library_requires_sign_in(self):
        response = self.client.get("/api/library")
        self.assertEqual(response.status_code, 401)
        response = self.client.post(
            "/api/library/upload-url",
            json={"file_name": "a.pdf", "file_size": 1, "content_type": "application/pdf"},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "You must be signed in to upload PDFs")

    def test_upload_url_validation_is_400(self):
        response = self.client.post(
            "/api/library/upload-url",
            json={"file_name": "a.txt", "file_size": 1, "content_type": "text/plain"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Only PDF files are allowed")

    def test_multipart_upload_counts_pages(self):
        response = self.client.post(
            "/api/library/upload",
            files={"file": ("two.pdf", make_pdf(2), "application/pdf")},
            data={"title": "Two pages"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["page_count"], 2)

    def test_open_progress_and_listing(self):
        pdf = self._create_pdf()
        opened = self.client.get(f"/api/library/{pdf['id']}", headers=self.headers).json()
        self.assertEqual(opened["initial_page"], 1)
        self.assertIn(pdf["file_path"], opened["signed_url"])

        response = self.client.put(
            f"/api/library/{pdf['id']}/progress",
            json={"current_page": 4, "total_pages": 8},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)

        progress = self.client.get(
            f"/api/library/{pdf['id']}/progress", headers=self.headers
        ).json()["progress"]
        self.assertEqual(progress["current_page"], 4)

        listing = self.client.get("/api/library", headers=self.headers).json()["pdfs"]
        self.assertEqual(listing[0]["progress_percent"], 50)

        other = self.client.get("/api/library", headers=self.other_headers).json()["pdfs"]
        self.assertEqual(other[0]["progress_percent"], 0)

    def test_progress_out_of_range_is_400(self):
        pdf = self._create_pdf()
        response = self.client.put(
            f"/api/library/{pdf['id']}/progress",
            json={"current_page": 9, "total_pages": 8},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)

    def test_update_and_delete_pdf(self):
        pdf = self._create_pdf()
        response = self.client.patch(
            f"/api/library/{pdf['id']}",
            json={"title": "Renamed", "description": ""},
            headers=self.headers,
        )
        self.assertEqual(response.json()["title"], "Renamed")
        self.assertIsNone(response.json()["description"])

        response = self.client.delete(f"/api/library/{pdf['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        response = self.client.get(f"/api/library/{pdf['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_notes_flow_and_ownership(self):
        pdf = self._create_pdf("Notes book")
        created = self.client.post(
            f"/api/library/{pdf['id']}/notes",
            json={"page_number": 2, "content": "  remember this "},
            headers=self.headers,
        )
        self.assertEqual(created.status_code, 201)
        note = created.json()
        self.assertEqual(note["content"], "remember this")

        page = self.client.get(f"/api/library/{pdf['id']}/notes", params={"page": 2}).json()
        self.assertEqual([n["id"] for n in page["notes"]], [note["id"]])

        forbidden = self.client.patch(
            f"/api/notes/{note['id']}", json={"content": "mine now"}, headers=self.other_headers
        )
        self.assertEqual(forbidden.status_code, 403)
        self.assertEqual(forbidden.json()["detail"], "You can only edit your own notes")

        anonymous = self.client.delete(f"/api/notes/{note['id']}")
        self.assertEqual(anonymous.status_code, 401)

        everything = self.client.get("/api/notes", params={"q": "REMEMBER"}).json()["notes"]
        self.assertEqual(everything[0]["document_title"], "Notes book")
        self.assertEqual(everything[0]["content"], "remember this")

        documents = self.client.get("/api/notes/documents").json()["documents"]
        self.assertEqual(documents, [{"id": pdf["id"], "title": "Notes book"}])

        deleted = self.client.delete(f"/api/notes/{note['id']}", headers=self.headers)
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(self.client.get("/api/notes").json()["notes"], [])

    def test_empty_note_is_400(self):
        pdf = self._create_pdf()
        response = self.client.post(
            f"/api/library/{pdf['id']}/notes",
            json={"page_number": 1, "content": "   "},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Note content is required")

    def test_posts_flow(self):
        response = self.client.post(
            "/api/posts",
            json={"title": "First Post", "content": "<p>hi</p>", "publish": True},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 201)
        post = response.json()
        self.assertEqual(post["slug"], "first-post")

        listed = self.client.get("/api/posts").json()["posts"]
        self.assertEqual([p["slug"] for p in listed], ["first-post"])
        self.assertEqual(self.client.get("/api/posts/first-post").json()["id"], post["id"])

        views = self.client.post(f"/api/posts/{post['id']}/views").json()
        self.assertEqual(views["view_count"], 1)

        patched = self.client.patch(
            f"/api/posts/{post['id']}", json={"status": "archived"}, headers=self.headers
        )
        self.assertEqual(patched.json()["status"], "archived")
        self.assertEqual(self.client.get("/api/posts/first-post").status_code, 404)

        drafts = self.client.get(
            "/api/posts", params={"include_drafts": True}, headers=self.headers
        ).json()["posts"]
        self.assertEqual(len(drafts), 1)

        deleted = self.client.delete(f"/api/posts/{post['id']}", headers=self.headers)
        self.assertEqual(deleted.status_code, 200)

    def test_image_upload_url(self):
        response = self.client.post(
            "/api/images/upload-url",
            json={"file_name": "cat.jpg", "file_size": 2048, "content_type": "image/jpeg"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["path"].startswith("blog-posts/"))

    def test_quick_refs_crud(self):
        created = self.client.post(
            "/api/quick-refs",
            json={"name": "tar", "content": "tar -xzf file.tgz", "tag": ""},
            headers=self.headers,
        )
        self.assertEqual(created.status_code, 201)
        ref = created.json()
        self.assertIsNone(ref["tag"])

        patched = self.client.patch(
            f"/api/quick-refs/{ref['id']}", json={"tag": "cli"}, headers=self.headers
        ).json()
        self.assertEqual(patched["tag"], "cli")
        self.assertEqual(patched["content"], "tar -xzf file.tgz")

        listed = self.client.get("/api/quick-refs").json()["quick_refs"]
        self.assertEqual([r["id"] for r in listed], [ref["id"]])

        self.assertEqual(
            self.client.delete(f"/api/quick-refs/{ref['id']}").status_code, 401
        )
        self.assertEqual(
            self.client.delete(f"/api/quick-refs/{ref['id']}", headers=self.headers).status_code,
            200,
        )

    def test_apps_do_not_share_state(self):
        other = TestClient(create_app(AppContext.in_memory()))
        self._create_pdf()
        self.assertEqual(len(self.context.db.pdfs), 1)
        response = other.post("/api/auth/sign-in", json={"email": "owner@example.com", "password": "pw"})
        self.assertEqual(response.status_code, 401)

    def test_lifespan_builds_and_closes_context(self):
        app = create_app(None)
        with TestClient(app) as client:
            self.assertIsNotNone(app.state.context)
            self.assertEqual(client.get("/api/health").status_code, 200)
        self.assertIsNone(app.state.context)

class BackendFailureTests(unittest.TestCase):
    def setUp(self):
        self.context = AppContext.in_memory()
        self.client = TestClient(create_app(self.context), raise_server_exceptions=False)
        user = self.context.auth.add_user("owner@example.com", "pw", user_id="owner")
        self.headers = {"Authorization": f"Bearer {self.context.auth.issue_token(user)}"}
        self.context.db.create_pdf(
            PdfDocument(id="d", title="Doc", file_path="library/d.pdf", user_id="owner")
        )

    def test_note_write_failure_returns_json_detail(self):
        with patch.object(self.context.db, "create_note", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend", level="ERROR"):
                response = self.client.post(
                    "/api/library/d/notes",
                    json={"page_number": 1, "content": "hello"},
                    headers=self.headers,
                )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"detail": "Failed to save note"})

    def test_unexpected_read_failure_returns_generic_detail(self):
        with patch.object(self.context.db, "list_quick_refs", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.app", level="ERROR"):
                response = self.client.get("/api/quick-refs")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(), {"detail": "Something went wrong. Please try again."}
        )



if __name__ == "__main__":
    unittest.main()
