from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: Optional[str] = None


class AuthEventKind(StrEnum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class AuthEvent:
    kind: AuthEventKind
    user_id: str
    email: Optional[str] = None

    def as_dict(self) -> dict:
        return {"kind": self.kind.value, "user_id": self.user_id, "email": self.email}

    @classmethod
    def from_dict(cls, payload: dict) -> "AuthEvent":
        return cls(
            kind=AuthEventKind(payload["kind"]),
            user_id=payload["user_id"],
            email=payload.get("email"),
        )


@dataclass
class ReadingSession:
    """How far one user has read into one document.

    Unique per (user_id, document_id); writes are upserts and the last writer
    wins.
    """

    user_id: str
    document_id: str
    current_page: int
    total_pages: int
    last_read_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if self.current_page < 1 or self.total_pages < 1:
            raise ValueError("current_page and total_pages must be >= 1")
        if self.current_page > self.total_pages:
            raise ValueError("current_page cannot exceed total_pages")

    @property
    def percent(self) -> int:
        return round(self.current_page / self.total_pages * 100)

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "document_id": self.document_id,
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "last_read_at": self.last_read_at,
        }


@dataclass
class Note:
    id: str
    document_id: str
    user_id: str
    page_number: int
    content: str
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "document_id": self.document_id,
            "user_id": self.user_id,
            "page_number": self.page_number,
            "content": self.content,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class NoteWithDocument:
    note: Note
    document_title: str
    document_description: Optional[str] = None

    def as_dict(self) -> dict:
        payload = self.note.as_dict()
        payload["document_title"] = self.document_title
        payload["document_description"] = self.document_description
        return payload


@dataclass
class PdfDocument:
    id: str
    title: str
    file_path: str
    user_id: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    page_count: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "file_path": self.file_path,
            "thumbnail_url": self.thumbnail_url,
            "user_id": self.user_id,
            "page_count": self.page_count,
            "created_at": self.created_at,
        }


@dataclass
class PdfWithProgress:
    document: PdfDocument
    progress: Optional[ReadingSession] = None

    @property
    def progress_percent(self) -> int:
        if not self.progress:
            return 0
        return self.progress.percent

    def as_dict(self) -> dict:
        payload = self.document.as_dict()
        payload["current_page"] = self.progress.current_page if self.progress else None
        payload["total_pages"] = self.progress.total_pages if self.progress else None
        payload["last_read_at"] = self.progress.last_read_at if self.progress else None
        payload["progress_percent"] = self.progress_percent
        return payload


@dataclass
class BlogPost:
    id: int
    title: str
    slug: str
    content: str
    status: PostStatus = PostStatus.DRAFT
    excerpt: Optional[str] = None
    author_id: Optional[str] = None
    view_count: int = 0
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    published_at: Optional[datetime] = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "status": self.status.value,
            "excerpt": self.excerpt,
            "author_id": self.author_id,
            "view_count": self.view_count,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "published_at": self.published_at,
        }


@dataclass
class BlogImage:
    post_id: int
    image_order: int
    file_path: str
    alt_text: str = ""
    file_name: str = ""


@dataclass
class QuickRef:
    id: str
    name: str
    content: Optional[str] = None
    link: Optional[str] = None
    tag: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "link": self.link,
            "tag": self.tag,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
