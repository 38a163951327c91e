import unittest
from unittest.mock import patch

from backend.db import InMemoryDbClient
from backend.posts import PostsService, extract_images
from backend.storage import InMemoryStorageClient
from shared.errors import (
    InvalidInputError,
    NotAuthenticatedError,
    NotFoundError,
    ServiceError,
)
from shared.types import AuthUser, PostStatus

HTML = (
    '<p>Intro</p><img src="https://cdn.test/blog-posts/a.png" alt="First">'
    '<p><img src="https://cdn.test/blog-posts/b.jpg"></p>'
)


class ExtractImagesTests(unittest.TestCase):
    def test_images_in_document_order(self):
        images = extract_images(HTML)
        self.assertEqual(
            images,
            [
                {"src": "https://cdn.test/blog-posts/a.png", "alt": "First", "order": 0},
                {"src": "https://cdn.test/blog-posts/b.jpg", "alt": "", "order": 1},
            ],
        )

    def test_no_images(self):
        self.assertEqual(extract_images("<p>plain</p>"), [])
        self.assertEqual(extract_images(""), [])


class PostsServiceTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.service = PostsService(self.db, InMemoryStorageClient())
        self.author = AuthUser(id="author")

    def test_slug_generated_from_title(self):
        post = self.service.create_post(self.author, "Hello, World! 2024")
        self.assertEqual(post.slug, "hello-world-2024")
        self.assertEqual(post.status, PostStatus.DRAFT)
        self.assertIsNone(post.published_at)

    def test_publish_sets_timestamp_and_saves_images(self):
        post = self.service.create_post(self.author, "Pics", content=HTML, publish=True)
        self.assertEqual(post.status, PostStatus.PUBLISHED)
        self.assertIsNotNone(post.published_at)
        images = self.db.list_post_images(post.id)
        self.assertEqual([i.file_name for i in images], ["a.png", "b.jpg"])
        self.assertEqual(images[0].alt_text, "First")

    def test_cannot_publish_empty_post(self):
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.create_post(self.author, "Empty", content="  ", publish=True)
        self.assertEqual(ctx.exception.message, "Cannot publish an empty post")

    def test_duplicate_slug_rejected(self):
        self.service.create_post(self.author, "Same")
        with self.assertRaises(InvalidInputError):
            self.service.create_post(self.author, "Other", slug="same")

    def test_anonymous_cannot_write(self):
        with self.assertRaises(NotAuthenticatedError):
            self.service.create_post(None, "Nope")

    def test_drafts_hidden_from_anonymous_readers(self):
        self.service.create_post(self.author, "Secret")
        with self.assertRaises(NotFoundError):
            self.service.get_by_slug("secret")
        self.assertEqual(self.service.get_by_slug("secret", self.author).title, "Secret")
        self.assertEqual(self.service.list_published(), [])

    def test_update_to_published(self):
        post = self.service.create_post(self.author, "Later", content="<p>body</p>")
        updated = self.service.update_post(self.author, post.id, {"status": "published"})
        self.assertEqual(updated.status, PostStatus.PUBLISHED)
        self.assertIsNotNone(updated.published_at)
        self.assertEqual([p.id for p in self.service.list_published()], [post.id])

    def test_update_rejects_taken_slug(self):
        self.service.create_post(self.author, "First")
        second = self.service.create_post(self.author, "Second")
        with self.assertRaises(InvalidInputError):
            self.service.update_post(self.author, second.id, {"slug": "first"})

    def test_view_counter_and_delete(self):
        post = self.service.create_post(self.author, "Count", content="x", publish=True)
        self.assertEqual(self.service.record_view(post.id), 1)
        self.assertEqual(self.service.record_view(post.id), 2)
        self.service.delete_post(self.author, post.id)
        with self.assertRaises(NotFoundError):
            self.service.record_view(post.id)

    def test_image_upload_url_checks_type_and_size(self):
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.create_image_upload_url(self.author, "a.pdf", 10, "application/pdf")
        self.assertEqual(ctx.exception.message, "Please upload an image file")
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.create_image_upload_url(
                self.author, "a.png", 5 * 1024 * 1024 + 1, "image/png"
            )
        self.assertEqual(ctx.exception.message, "Image must be smaller than 5MB")

        result = self.service.create_image_upload_url(self.author, "Photo.PNG", 100, "image/png")
        self.assertTrue(result["path"].startswith("blog-posts/blog-images/"))
        self.assertTrue(result["path"].endswith(".png"))
        self.assertTrue(result["public_url"].endswith(result["path"]))

class PostsServiceFailureTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.service = PostsService(self.db, self.storage)
        self.author = AuthUser(id="author")

    def test_create_failure_is_logged_and_generic(self):
        with patch.object(self.db, "create_post", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.posts", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.create_post(self.author, "Title", "body")
        self.assertEqual(ctx.exception.message, "Failed to save post")
        self.assertIsNone(self.db.get_post_by_slug("title"))

    def test_update_and_delete_failures(self):
        post = self.service.create_post(self.author, "Title", "body")
        with patch.object(self.db, "update_post", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.posts", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.update_post(self.author, post.id, {"title": "New"})
        self.assertEqual(ctx.exception.message, "Failed to update post")
        self.assertEqual(self.db.get_post(post.id).title, "Title")

        with patch.object(self.db, "delete_post", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.posts", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.delete_post(self.author, post.id)
        self.assertEqual(ctx.exception.message, "Failed to delete post")
        self.assertIsNotNone(self.db.get_post(post.id))

    def test_image_upload_url_failure(self):
        with patch.object(self.storage, "presign_put", side_effect=RuntimeError("s3 down")):
            with self.assertLogs("backend.posts", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.create_image_upload_url(self.author, "a.png", 100, "image/png")
        self.assertEqual(ctx.exception.message, "Failed to create upload URL")



if __name__ == "__main__":
    unittest.main()
