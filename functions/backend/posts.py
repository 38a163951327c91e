"""
Blog posts: drafts, publishing, view counts and inline images.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup

from backend.db import DbClient
from backend.storage import StorageClient
from shared.constants import BLOG_IMAGES_PREFIX, MAX_IMAGE_SIZE_BYTES, MAX_SLUG_LENGTH
from shared.errors import (
    InvalidInputError,
    NotAuthenticatedError,
    NotFoundError,
    ServiceError,
)
from shared.types import AuthUser, BlogImage, BlogPost, PostStatus, utcnow
from shared.validation import blank_to_none, clean_title, slugify

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "slug", "content", "excerpt", "meta_title", "meta_description", "status")


def extract_images(html: str) -> list[dict]:
    """Return ``src``/``alt``/``order`` for every <img> in document order."""
    soup = BeautifulSoup(html or "", "html.parser")
    images = []
    for order, tag in enumerate(soup.find_all("img")):
        src = tag.get("src")
        if not src:
            continue
        images.append({"src": src, "alt": tag.get("alt", ""), "order": order})
    return images


def _clean_slug(slug: Optional[str], title: str) -> str:
    cleaned = slugify(slug or title)
    if not cleaned:
        raise InvalidInputError("Please provide a title and slug")
    if len(cleaned) > MAX_SLUG_LENGTH:
        raise InvalidInputError(f"Slug must be less than {MAX_SLUG_LENGTH} characters")
    return cleaned


@dataclass
class PostsService:
    db: DbClient
    storage: StorageClient

    def list_published(self, limit: int = 100) -> list[BlogPost]:
        return self.db.list_posts(status=PostStatus.PUBLISHED, limit=limit)

    def list_all(self, user: Optional[AuthUser], limit: int = 100) -> list[BlogPost]:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to see drafts")
        return self.db.list_posts(limit=limit)

    def get_by_slug(self, slug: str, user: Optional[AuthUser] = None) -> BlogPost:
        post = self.db.get_post_by_slug(slug)
        if post is None:
            raise NotFoundError("Post not found")
        if post.status != PostStatus.PUBLISHED and user is None:
            raise NotFoundError("Post not found")
        return post

    def create_post(
        self,
        user: Optional[AuthUser],
        title: str,
        content: str = "",
        slug: Optional[str] = None,
        excerpt: Optional[str] = None,
        publish: bool = False,
        meta_title: Optional[str] = None,
        meta_description: Optional[str] = None,
    ) -> BlogPost:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to write posts")
        title = clean_title(title)
        slug = _clean_slug(slug, title)
        if publish and not (content or "").strip():
            raise InvalidInputError("Cannot publish an empty post")
        if self.db.get_post_by_slug(slug) is not None:
            raise InvalidInputError("A post with this slug already exists")

        now = utcnow()
        draft = BlogPost(
            id=0,
            title=title,
            slug=slug,
            content=content or "",
            status=PostStatus.PUBLISHED if publish else PostStatus.DRAFT,
            excerpt=blank_to_none(excerpt),
            author_id=user.id,
            meta_title=blank_to_none(meta_title),
            meta_description=blank_to_none(meta_description),
            created_at=now,
            updated_at=now,
            published_at=now if publish else None,
        )
        try:
            post = self.db.create_post(draft)
        except Exception as exc:
            logger.error("Failed to save post %s: %s", slug, exc)
            raise ServiceError("Failed to save post") from exc
        self._save_images(post)
        return post

    def _save_images(self, post: BlogPost) -> None:
        try:
            images = extract_images(post.content)
            if images:
                self.db.save_post_images(
                    post.id,
                    [
                        BlogImage(
                            post_id=post.id,
                            image_order=image["order"],
                            file_path=image["src"],
                            alt_text=image["alt"],
                            file_name=image["src"].rsplit("/", 1)[-1],
                        )
                        for image in images
                    ],
                )
        except Exception:
            # The post itself is saved; image records are a convenience index.
            logger.exception("Error saving images for post %s", post.id)

    def update_post(self, user: Optional[AuthUser], post_id: int, changes: dict) -> BlogPost:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to edit posts")
        post = self.db.get_post(post_id)
        if post is None:
            raise NotFoundError("Post not found")

        fields = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None}
        if "title" in fields:
            fields["title"] = clean_title(fields["title"])
        if "slug" in fields:
            fields["slug"] = _clean_slug(fields["slug"], fields.get("title", post.title))
            existing = self.db.get_post_by_slug(fields["slug"])
            if existing is not None and existing.id != post_id:
                raise InvalidInputError("A post with this slug already exists")
        for key in ("excerpt", "meta_title", "meta_description"):
            if key in fields:
                fields[key] = blank_to_none(fields[key])
        if "status" in fields:
            fields["status"] = PostStatus(fields["status"])
            content = fields.get("content", post.content)
            if fields["status"] == PostStatus.PUBLISHED:
                if not (content or "").strip():
                    raise InvalidInputError("Cannot publish an empty post")
                if post.published_at is None:
                    fields["published_at"] = utcnow()

        fields["updated_at"] = utcnow()
        try:
            updated = self.db.update_post(post_id, fields)
        except Exception as exc:
            logger.error("Failed to update post %s: %s", post_id, exc)
            raise ServiceError("Failed to update post") from exc
        if updated is None:
            raise NotFoundError("Post not found")
        if "content" in fields:
            self._save_images(updated)
        return updated

    def delete_post(self, user: Optional[AuthUser], post_id: int) -> None:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to delete posts")
        try:
            deleted = self.db.delete_post(post_id)
        except Exception as exc:
            logger.error("Failed to delete post %s: %s", post_id, exc)
            raise ServiceError("Failed to delete post") from exc
        if not deleted:
            raise NotFoundError("Post not found")

    def record_view(self, post_id: int) -> int:
        count = self.db.increment_view_count(post_id)
        if count is None:
            raise NotFoundError("Post not found")
        return count

    def create_image_upload_url(
        self,
        user: Optional[AuthUser],
        file_name: str,
        file_size: int,
        content_type: str,
    ) -> dict:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to upload images")
        if not (content_type or "").startswith("image/"):
            raise InvalidInputError("Please upload an image file")
        if file_size > MAX_IMAGE_SIZE_BYTES:
            raise InvalidInputError("Image must be smaller than 5MB")

        extension = file_name.rsplit(".", 1)[-1].lower() if "." in (file_name or "") else "bin"
        timestamp = int(utcnow().timestamp() * 1000)
        path = f"{BLOG_IMAGES_PREFIX}/blog-images/{uuid.uuid4().hex[:10]}-{timestamp}.{extension}"
        try:
            signed_url = self.storage.presign_put(path, content_type=content_type)
        except Exception as exc:
            logger.error("Failed to create signed upload URL for %s: %s", path, exc)
            raise ServiceError("Failed to create upload URL") from exc
        return {
            "signed_url": signed_url,
            "path": path,
            "public_url": self.storage.public_url(path),
        }
