"""
Database abstraction for Postgres and an in-memory test implementation.

Table names match the hosted project's schema so either client can sit in
front of the same data.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    String,
    Text,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shared import constants
from shared.types import (
    BlogImage,
    BlogPost,
    Note,
    PdfDocument,
    PostStatus,
    QuickRef,
    ReadingSession,
    utcnow,
)


class DbClient(Protocol):
    """Interface for database access."""

    # blog_posts / blog_images
    def create_post(self, post: BlogPost) -> BlogPost:
        ...

    def get_post(self, post_id: int) -> Optional[BlogPost]:
        ...

    def get_post_by_slug(self, slug: str) -> Optional[BlogPost]:
        ...

    def list_posts(
        self, status: Optional[PostStatus] = None, limit: int = 100
    ) -> list[BlogPost]:
        ...

    def update_post(self, post_id: int, fields: dict) -> Optional[BlogPost]:
        ...

    def delete_post(self, post_id: int) -> bool:
        ...

    def increment_view_count(self, post_id: int) -> Optional[int]:
        ...

    def save_post_images(self, post_id: int, images: list[BlogImage]) -> None:
        ...

    def list_post_images(self, post_id: int) -> list[BlogImage]:
        ...

    # pdf_library
    def create_pdf(self, document: PdfDocument) -> PdfDocument:
        ...

    def get_pdf(self, pdf_id: str) -> Optional[PdfDocument]:
        ...

    def list_pdfs(self, limit: int = 500) -> list[PdfDocument]:
        ...

    def update_pdf(self, pdf_id: str, fields: dict) -> Optional[PdfDocument]:
        ...

    def delete_pdf(self, pdf_id: str) -> bool:
        ...

    # user_pdf_progress
    def upsert_progress(self, session: ReadingSession) -> None:
        ...

    def get_progress(self, user_id: str, pdf_id: str) -> Optional[ReadingSession]:
        ...

    def list_progress(self, user_id: str) -> list[ReadingSession]:
        ...

    # pdf_notes
    def create_note(self, note: Note) -> Note:
        ...

    def get_note(self, note_id: str) -> Optional[Note]:
        ...

    def list_notes(
        self,
        pdf_id: Optional[str] = None,
        page_number: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 500,
    ) -> list[Note]:
        ...

    def update_note(
        self, note_id: str, content: str, updated_at: datetime
    ) -> Optional[Note]:
        ...

    def delete_note(self, note_id: str) -> bool:
        ...

    # quick_ref
    def create_quick_ref(self, ref: QuickRef) -> QuickRef:
        ...

    def get_quick_ref(self, ref_id: str) -> Optional[QuickRef]:
        ...

    def list_quick_refs(self, limit: int = 500) -> list[QuickRef]:
        ...

    def update_quick_ref(self, ref_id: str, fields: dict) -> Optional[QuickRef]:
        ...

    def delete_quick_ref(self, ref_id: str) -> bool:
        ...

    def close(self) -> None:
        ...


def _newest_first(items: list, key) -> list:
    # Ties keep the most recently inserted item first.
    return sorted(reversed(items), key=key, reverse=True)


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.posts: Dict[int, BlogPost] = {}
        self.post_images: Dict[int, list[BlogImage]] = {}
        self.pdfs: Dict[str, PdfDocument] = {}
        self.progress: Dict[tuple[str, str], ReadingSession] = {}
        self.notes: Dict[str, Note] = {}
        self.quick_refs: Dict[str, QuickRef] = {}
        self._next_post_id = 1

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.posts.clear()
        self.post_images.clear()
        self.pdfs.clear()
        self.progress.clear()
        self.notes.clear()
        self.quick_refs.clear()
        self._next_post_id = 1

    def close(self) -> None:
        pass

    def create_post(self, post: BlogPost) -> BlogPost:
        stored = replace(post, id=self._next_post_id)
        self._next_post_id += 1
        self.posts[stored.id] = stored
        return replace(stored)

    def get_post(self, post_id: int) -> Optional[BlogPost]:
        post = self.posts.get(post_id)
        return replace(post) if post else None

    def get_post_by_slug(self, slug: str) -> Optional[BlogPost]:
        for post in self.posts.values():
            if post.slug == slug:
                return replace(post)
        return None

    def list_posts(
        self, status: Optional[PostStatus] = None, limit: int = 100
    ) -> list[BlogPost]:
        posts = [
            replace(p)
            for p in self.posts.values()
            if status is None or p.status == status
        ]
        return _newest_first(posts, lambda p: p.published_at or p.created_at)[:limit]

    def update_post(self, post_id: int, fields: dict) -> Optional[BlogPost]:
        post = self.posts.get(post_id)
        if not post:
            return None
        updated = replace(post, **fields)
        self.posts[post_id] = updated
        return replace(updated)

    def delete_post(self, post_id: int) -> bool:
        self.post_images.pop(post_id, None)
        return self.posts.pop(post_id, None) is not None

    def increment_view_count(self, post_id: int) -> Optional[int]:
        post = self.posts.get(post_id)
        if not post:
            return None
        post.view_count += 1
        return post.view_count

    def save_post_images(self, post_id: int, images: list[BlogImage]) -> None:
        self.post_images.setdefault(post_id, []).extend(images)

    def list_post_images(self, post_id: int) -> list[BlogImage]:
        return sorted(self.post_images.get(post_id, []), key=lambda i: i.image_order)

    def create_pdf(self, document: PdfDocument) -> PdfDocument:
        stored = replace(document, id=document.id or uuid.uuid4().hex)
        self.pdfs[stored.id] = stored
        return replace(stored)

    def get_pdf(self, pdf_id: str) -> Optional[PdfDocument]:
        document = self.pdfs.get(pdf_id)
        return replace(document) if document else None

    def list_pdfs(self, limit: int = 500) -> list[PdfDocument]:
        docs = [replace(d) for d in self.pdfs.values()]
        return _newest_first(docs, lambda d: d.created_at)[:limit]

    def update_pdf(self, pdf_id: str, fields: dict) -> Optional[PdfDocument]:
        document = self.pdfs.get(pdf_id)
        if not document:
            return None
        updated = replace(document, **fields)
        self.pdfs[pdf_id] = updated
        return replace(updated)

    def delete_pdf(self, pdf_id: str) -> bool:
        if self.pdfs.pop(pdf_id, None) is None:
            return False
        for key in [k for k in self.progress if k[1] == pdf_id]:
            del self.progress[key]
        for note_id in [n.id for n in self.notes.values() if n.document_id == pdf_id]:
            del self.notes[note_id]
        return True

    def upsert_progress(self, session: ReadingSession) -> None:
        self.progress[(session.user_id, session.document_id)] = replace(session)

    def get_progress(self, user_id: str, pdf_id: str) -> Optional[ReadingSession]:
        session = self.progress.get((user_id, pdf_id))
        return replace(session) if session else None

    def list_progress(self, user_id: str) -> list[ReadingSession]:
        return [replace(s) for (uid, _), s in self.progress.items() if uid == user_id]

    def create_note(self, note: Note) -> Note:
        stored = replace(note, id=note.id or uuid.uuid4().hex)
        self.notes[stored.id] = stored
        return replace(stored)

    def get_note(self, note_id: str) -> Optional[Note]:
        note = self.notes.get(note_id)
        return replace(note) if note else None

    def list_notes(
        self,
        pdf_id: Optional[str] = None,
        page_number: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 500,
    ) -> list[Note]:
        needle = search.lower() if search else None
        notes = [
            replace(n)
            for n in self.notes.values()
            if (pdf_id is None or n.document_id == pdf_id)
            and (page_number is None or n.page_number == page_number)
            and (needle is None or needle in n.content.lower())
        ]
        return _newest_first(notes, lambda n: n.created_at)[:limit]

    def update_note(
        self, note_id: str, content: str, updated_at: datetime
    ) -> Optional[Note]:
        note = self.notes.get(note_id)
        if not note:
            return None
        note.content = content
        note.updated_at = updated_at
        return replace(note)

    def delete_note(self, note_id: str) -> bool:
        return self.notes.pop(note_id, None) is not None

    def create_quick_ref(self, ref: QuickRef) -> QuickRef:
        stored = replace(ref, id=ref.id or uuid.uuid4().hex)
        self.quick_refs[stored.id] = stored
        return replace(stored)

    def get_quick_ref(self, ref_id: str) -> Optional[QuickRef]:
        ref = self.quick_refs.get(ref_id)
        return replace(ref) if ref else None

    def list_quick_refs(self, limit: int = 500) -> list[QuickRef]:
        refs = [replace(r) for r in self.quick_refs.values()]
        return _newest_first(refs, lambda r: r.created_at)[:limit]

    def update_quick_ref(self, ref_id: str, fields: dict) -> Optional[QuickRef]:
        ref = self.quick_refs.get(ref_id)
        if not ref:
            return None
        updated = replace(ref, **fields)
        self.quick_refs[ref_id] = updated
        return replace(updated)

    def delete_quick_ref(self, ref_id: str) -> bool:
        return self.quick_refs.pop(ref_id, None) is not None


# Dialects whose insert() supports ON CONFLICT DO UPDATE.
UPSERT_DIALECTS = {"postgresql": postgresql, "sqlite": sqlite}


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back out.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    # -- converters -------------------------------------------------------

    def _to_post(self, row: "BlogPostRow") -> BlogPost:
        return BlogPost(
            id=row.id,
            title=row.title,
            slug=row.slug,
            content=row.content,
            status=PostStatus(row.status),
            excerpt=row.excerpt,
            author_id=row.author_id,
            view_count=row.view_count,
            meta_title=row.meta_title,
            meta_description=row.meta_description,
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
            published_at=_aware(row.published_at),
        )

    def _to_pdf(self, row: "PdfRow") -> PdfDocument:
        return PdfDocument(
            id=row.id,
            title=row.title,
            description=row.description,
            file_path=row.file_path,
            thumbnail_url=row.thumbnail_url,
            user_id=row.user_id,
            page_count=row.page_count,
            created_at=_aware(row.created_at),
        )

    def _to_progress(self, row: "ProgressRow") -> ReadingSession:
        return ReadingSession(
            user_id=row.user_id,
            document_id=row.pdf_id,
            current_page=row.current_page,
            total_pages=row.total_pages,
            last_read_at=_aware(row.last_read_at),
        )

    def _to_note(self, row: "NoteRow") -> Note:
        return Note(
            id=row.id,
            document_id=row.pdf_id,
            user_id=row.user_id,
            page_number=row.page_number,
            content=row.content,
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )

    def _to_quick_ref(self, row: "QuickRefRow") -> QuickRef:
        return QuickRef(
            id=row.id,
            name=row.name,
            content=row.content,
            link=row.link,
            tag=row.tag,
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )

    @staticmethod
    def _apply(row, fields: dict) -> None:
        for key, value in fields.items():
            if isinstance(value, PostStatus):
                value = value.value
            setattr(row, key, value)

    # -- blog posts ---------------------------------------------------------

    def create_post(self, post: BlogPost) -> BlogPost:
        with self.Session() as session:
            row = BlogPostRow(
                title=post.title,
                slug=post.slug,
                content=post.content,
                excerpt=post.excerpt,
                author_id=post.author_id,
                status=post.status.value,
                view_count=post.view_count,
                meta_title=post.meta_title,
                meta_description=post.meta_description,
                created_at=post.created_at,
                updated_at=post.updated_at,
                published_at=post.published_at,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_post(row)

    def get_post(self, post_id: int) -> Optional[BlogPost]:
        with self.Session() as session:
            row = session.get(BlogPostRow, post_id)
            return self._to_post(row) if row else None

    def get_post_by_slug(self, slug: str) -> Optional[BlogPost]:
        with self.Session() as session:
            stmt = select(BlogPostRow).where(BlogPostRow.slug == slug).limit(1)
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_post(row) if row else None

    def list_posts(
        self, status: Optional[PostStatus] = None, limit: int = 100
    ) -> list[BlogPost]:
        with self.Session() as session:
            stmt = select(BlogPostRow)
            if status is not None:
                stmt = stmt.where(BlogPostRow.status == status.value)
            stmt = stmt.order_by(
                func.coalesce(BlogPostRow.published_at, BlogPostRow.created_at).desc(),
                BlogPostRow.id.desc(),
            ).limit(limit)
            return [self._to_post(row) for row in session.execute(stmt).scalars()]

    def update_post(self, post_id: int, fields: dict) -> Optional[BlogPost]:
        with self.Session() as session:
            row = session.get(BlogPostRow, post_id)
            if not row:
                return None
            self._apply(row, fields)
            session.commit()
            session.refresh(row)
            return self._to_post(row)

    def delete_post(self, post_id: int) -> bool:
        with self.Session() as session:
            row = session.get(BlogPostRow, post_id)
            if not row:
                return False
            session.execute(delete(BlogImageRow).where(BlogImageRow.post_id == post_id))
            session.delete(row)
            session.commit()
            return True

    def increment_view_count(self, post_id: int) -> Optional[int]:
        with self.Session() as session:
            row = session.get(BlogPostRow, post_id, with_for_update=True)
            if not row:
                return None
            row.view_count = (row.view_count or 0) + 1
            session.commit()
            return row.view_count

    def save_post_images(self, post_id: int, images: list[BlogImage]) -> None:
        with self.Session() as session:
            for image in images:
                session.add(
                    BlogImageRow(
                        id=uuid.uuid4().hex,
                        post_id=post_id,
                        image_order=image.image_order,
                        file_path=image.file_path,
                        alt_text=image.alt_text,
                        file_name=image.file_name,
                    )
                )
            session.commit()

    def list_post_images(self, post_id: int) -> list[BlogImage]:
        with self.Session() as session:
            stmt = (
                select(BlogImageRow)
                .where(BlogImageRow.post_id == post_id)
                .order_by(BlogImageRow.image_order.asc())
            )
            return [
                BlogImage(
                    post_id=row.post_id,
                    image_order=row.image_order,
                    file_path=row.file_path,
                    alt_text=row.alt_text or "",
                    file_name=row.file_name or "",
                )
                for row in session.execute(stmt).scalars()
            ]

    # -- pdf library --------------------------------------------------------

    def create_pdf(self, document: PdfDocument) -> PdfDocument:
        with self.Session() as session:
            row = PdfRow(
                id=document.id or uuid.uuid4().hex,
                title=document.title,
                description=document.description,
                file_path=document.file_path,
                thumbnail_url=document.thumbnail_url,
                user_id=document.user_id,
                page_count=document.page_count,
                created_at=document.created_at,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_pdf(row)

    def get_pdf(self, pdf_id: str) -> Optional[PdfDocument]:
        with self.Session() as session:
            row = session.get(PdfRow, pdf_id)
            return self._to_pdf(row) if row else None

    def list_pdfs(self, limit: int = 500) -> list[PdfDocument]:
        with self.Session() as session:
            stmt = select(PdfRow).order_by(PdfRow.created_at.desc()).limit(limit)
            return [self._to_pdf(row) for row in session.execute(stmt).scalars()]

    def update_pdf(self, pdf_id: str, fields: dict) -> Optional[PdfDocument]:
        with self.Session() as session:
            row = session.get(PdfRow, pdf_id)
            if not row:
                return None
            self._apply(row, fields)
            session.commit()
            session.refresh(row)
            return self._to_pdf(row)

    def delete_pdf(self, pdf_id: str) -> bool:
        with self.Session() as session:
            row = session.get(PdfRow, pdf_id)
            if not row:
                return False
            session.execute(delete(ProgressRow).where(ProgressRow.pdf_id == pdf_id))
            session.execute(delete(NoteRow).where(NoteRow.pdf_id == pdf_id))
            session.delete(row)
            session.commit()
            return True

    # -- reading progress ---------------------------------------------------

    def upsert_progress(self, reading: ReadingSession) -> None:
        dialect = UPSERT_DIALECTS.get(self.engine.dialect.name)
        if dialect is None:
            raise NotImplementedError(
                f"Progress upsert is not supported on {self.engine.dialect.name}"
            )
        values = {
            "current_page": reading.current_page,
            "total_pages": reading.total_pages,
            "last_read_at": reading.last_read_at,
        }
        stmt = dialect.insert(ProgressRow).values(
            user_id=reading.user_id, pdf_id=reading.document_id, **values
        )
        # Atomic on (user_id, pdf_id); no read before the write.
        stmt = stmt.on_conflict_do_update(
            index_elements=[ProgressRow.user_id, ProgressRow.pdf_id], set_=values
        )
        with self.Session() as session:
            session.execute(stmt)
            session.commit()

    def get_progress(self, user_id: str, pdf_id: str) -> Optional[ReadingSession]:
        with self.Session() as session:
            row = session.get(ProgressRow, (user_id, pdf_id))
            return self._to_progress(row) if row else None

    def list_progress(self, user_id: str) -> list[ReadingSession]:
        with self.Session() as session:
            stmt = select(ProgressRow).where(ProgressRow.user_id == user_id)
            return [self._to_progress(row) for row in session.execute(stmt).scalars()]

    # -- notes --------------------------------------------------------------

    def create_note(self, note: Note) -> Note:
        with self.Session() as session:
            row = NoteRow(
                id=note.id or uuid.uuid4().hex,
                pdf_id=note.document_id,
                user_id=note.user_id,
                page_number=note.page_number,
                content=note.content,
                created_at=note.created_at,
                updated_at=note.updated_at,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_note(row)

    def get_note(self, note_id: str) -> Optional[Note]:
        with self.Session() as session:
            row = session.get(NoteRow, note_id)
            return self._to_note(row) if row else None

    def list_notes(
        self,
        pdf_id: Optional[str] = None,
        page_number: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 500,
    ) -> list[Note]:
        with self.Session() as session:
            stmt = select(NoteRow)
            if pdf_id is not None:
                stmt = stmt.where(NoteRow.pdf_id == pdf_id)
            if page_number is not None:
                stmt = stmt.where(NoteRow.page_number == page_number)
            if search:
                stmt = stmt.where(NoteRow.content.ilike(f"%{search}%"))
            stmt = stmt.order_by(NoteRow.created_at.desc()).limit(limit)
            return [self._to_note(row) for row in session.execute(stmt).scalars()]

    def update_note(
        self, note_id: str, content: str, updated_at: datetime
    ) -> Optional[Note]:
        with self.Session() as session:
            row = session.get(NoteRow, note_id)
            if not row:
                return None
            row.content = content
            row.updated_at = updated_at
            session.commit()
            session.refresh(row)
            return self._to_note(row)

    def delete_note(self, note_id: str) -> bool:
        with self.Session() as session:
            row = session.get(NoteRow, note_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    # -- quick refs ---------------------------------------------------------

    def create_quick_ref(self, ref: QuickRef) -> QuickRef:
        with self.Session() as session:
            row = QuickRefRow(
                id=ref.id or uuid.uuid4().hex,
                name=ref.name,
                content=ref.content,
                link=ref.link,
                tag=ref.tag,
                created_at=ref.created_at,
                updated_at=ref.updated_at,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_quick_ref(row)

    def get_quick_ref(self, ref_id: str) -> Optional[QuickRef]:
        with self.Session() as session:
            row = session.get(QuickRefRow, ref_id)
            return self._to_quick_ref(row) if row else None

    def list_quick_refs(self, limit: int = 500) -> list[QuickRef]:
        with self.Session() as session:
            stmt = select(QuickRefRow).order_by(QuickRefRow.created_at.desc()).limit(limit)
            return [self._to_quick_ref(row) for row in session.execute(stmt).scalars()]

    def update_quick_ref(self, ref_id: str, fields: dict) -> Optional[QuickRef]:
        with self.Session() as session:
            row = session.get(QuickRefRow, ref_id)
            if not row:
                return None
            self._apply(row, fields)
            session.commit()
            session.refresh(row)
            return self._to_quick_ref(row)

    def delete_quick_ref(self, ref_id: str) -> bool:
        with self.Session() as session:
            row = session.get(QuickRefRow, ref_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True


Base = declarative_base()


class BlogPostRow(Base):
    __tablename__ = constants.BLOG_POSTS_TABLE

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False, default="")
    excerpt = Column(Text, nullable=True)
    author_id = Column(String, nullable=True)
    status = Column(String, nullable=False, index=True, default=PostStatus.DRAFT.value)
    view_count = Column(Integer, nullable=False, default=0)
    meta_title = Column(String, nullable=True)
    meta_description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    published_at = Column(DateTime(timezone=True), nullable=True)


class BlogImageRow(Base):
    __tablename__ = constants.BLOG_IMAGES_TABLE

    id = Column(String, primary_key=True)
    post_id = Column(Integer, nullable=False, index=True)
    image_order = Column(Integer, nullable=False, default=0)
    file_path = Column(String, nullable=False)
    alt_text = Column(String, nullable=True)
    file_name = Column(String, nullable=True)


class PdfRow(Base):
    __tablename__ = constants.PDF_LIBRARY_TABLE

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    file_path = Column(String, nullable=False)
    thumbnail_url = Column(String, nullable=True)
    user_id = Column(String, nullable=False, index=True)
    page_count = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class ProgressRow(Base):
    __tablename__ = constants.USER_PDF_PROGRESS_TABLE

    user_id = Column(String, primary_key=True)
    pdf_id = Column(String, primary_key=True)
    current_page = Column(Integer, nullable=False)
    total_pages = Column(Integer, nullable=False)
    last_read_at = Column(DateTime(timezone=True), nullable=False)


class NoteRow(Base):
    __tablename__ = constants.PDF_NOTES_TABLE

    id = Column(String, primary_key=True)
    pdf_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    page_number = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class QuickRefRow(Base):
    __tablename__ = constants.QUICK_REF_TABLE

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    content = Column(Text, nullable=True)
    link = Column(String, nullable=True)
    tag = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
