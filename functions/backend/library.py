"""
PDF library: uploads, metadata, opening documents and reading progress.

Large files go straight from the browser to storage through a signed upload
URL; the API only records metadata afterwards. Small files can also be
posted to the API directly.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from backend.db import DbClient
from backend.storage import StorageClient
from reader.document import DocumentLoadError, count_pages
from shared.constants import (
    LIBRARY_PREFIX,
    MAX_PDF_SIZE_BYTES,
    PDF_CONTENT_TYPE,
    SIGNED_URL_EXPIRES_SECONDS,
)
from shared.errors import (
    InvalidInputError,
    NotAuthenticatedError,
    NotFoundError,
    ServiceError,
)
from shared.types import AuthUser, PdfDocument, PdfWithProgress, ReadingSession, utcnow
from shared.validation import blank_to_none, clean_description, clean_title

logger = logging.getLogger(__name__)

SIGN_IN_TO_UPLOAD = "You must be signed in to upload PDFs"
SIZE_LIMIT_MESSAGE = f"File size exceeds {MAX_PDF_SIZE_BYTES // 1024 // 1024}MB limit"


def sanitize_file_name(file_name: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9.-]", "_", file_name)
    return re.sub(r"_+", "_", cleaned).lower()


def storage_path_for(file_name: str, now: Optional[datetime] = None) -> str:
    timestamp = int((now or utcnow()).timestamp() * 1000)
    return f"{LIBRARY_PREFIX}/{timestamp}-{sanitize_file_name(file_name)}"


def _require_user(user: Optional[AuthUser], message: str) -> AuthUser:
    if user is None:
        raise NotAuthenticatedError(message)
    return user


def _check_upload(file_name: Optional[str], file_size: int, content_type: Optional[str]) -> None:
    if not file_name:
        raise InvalidInputError("File name is required")
    if content_type != PDF_CONTENT_TYPE:
        raise InvalidInputError("Only PDF files are allowed")
    if file_size > MAX_PDF_SIZE_BYTES:
        raise InvalidInputError(SIZE_LIMIT_MESSAGE)


@dataclass
class OpenedDocument:
    document: PdfDocument
    signed_url: str
    initial_page: int
    progress: Optional[ReadingSession] = None

    def as_dict(self) -> dict:
        return {
            "document": self.document.as_dict(),
            "signed_url": self.signed_url,
            "initial_page": self.initial_page,
            "progress": self.progress.as_dict() if self.progress else None,
        }


@dataclass
class LibraryService:
    db: DbClient
    storage: StorageClient
    signed_url_expires_seconds: int = SIGNED_URL_EXPIRES_SECONDS

    # -- uploads ------------------------------------------------------------

    def create_upload_url(
        self,
        user: Optional[AuthUser],
        file_name: str,
        file_size: int,
        content_type: str,
    ) -> dict:
        _require_user(user, SIGN_IN_TO_UPLOAD)
        _check_upload(file_name, file_size, content_type)
        path = storage_path_for(file_name)
        try:
            signed_url = self.storage.presign_put(
                path,
                content_type=PDF_CONTENT_TYPE,
                expires_in=self.signed_url_expires_seconds,
            )
        except Exception as exc:
            logger.error("Failed to create signed upload URL for %s: %s", path, exc)
            raise ServiceError("Failed to create upload URL") from exc
        return {"signed_url": signed_url, "path": path}

    def save_metadata(
        self,
        user: Optional[AuthUser],
        file_path: str,
        title: str,
        description: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
        page_count: Optional[int] = None,
    ) -> PdfDocument:
        user = _require_user(user, SIGN_IN_TO_UPLOAD)
        if not file_path:
            raise InvalidInputError("File path is required")
        title = clean_title(title)
        description = clean_description(description)

        try:
            return self.db.create_pdf(
                PdfDocument(
                    id=uuid.uuid4().hex,
                    title=title,
                    description=description,
                    file_path=file_path,
                    thumbnail_url=blank_to_none(thumbnail_url),
                    user_id=user.id,
                    page_count=page_count,
                    created_at=utcnow(),
                )
            )
        except Exception as exc:
            logger.error("Database insert error for %s: %s", file_path, exc)
            self._remove_quietly(file_path)
            raise ServiceError("Failed to save PDF metadata") from exc

    def upload_pdf(
        self,
        user: Optional[AuthUser],
        file_name: str,
        data: bytes,
        content_type: str,
        title: str,
        description: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> PdfDocument:
        """Direct upload for small files; the signed URL flow handles the rest."""
        _require_user(user, SIGN_IN_TO_UPLOAD)
        if not data:
            raise InvalidInputError("No file provided")
        clean_title(title)
        _check_upload(file_name, len(data), content_type)
        try:
            page_count = count_pages(data)
        except DocumentLoadError as exc:
            raise InvalidInputError("File is not a readable PDF") from exc

        path = storage_path_for(file_name)
        try:
            self.storage.upload_bytes(path, data, PDF_CONTENT_TYPE)
        except Exception as exc:
            logger.error("Storage upload error for %s: %s", path, exc)
            raise ServiceError("Failed to upload file to storage") from exc

        return self.save_metadata(
            user,
            file_path=path,
            title=title,
            description=description,
            thumbnail_url=thumbnail_url,
            page_count=page_count,
        )

    # -- metadata -----------------------------------------------------------

    def get_document(self, pdf_id: str) -> PdfDocument:
        document = self.db.get_pdf(pdf_id)
        if document is None:
            raise NotFoundError("PDF not found")
        return document

    def update_pdf(
        self,
        user: Optional[AuthUser],
        pdf_id: str,
        title: str,
        description: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> PdfDocument:
        _require_user(user, "You must be signed in to update PDFs")
        fields = {
            "title": clean_title(title),
            "description": clean_description(description),
            "thumbnail_url": blank_to_none(thumbnail_url),
        }
        try:
            updated = self.db.update_pdf(pdf_id, fields)
        except Exception as exc:
            logger.error("Failed to update PDF %s: %s", pdf_id, exc)
            raise ServiceError("Failed to update PDF") from exc
        if updated is None:
            raise NotFoundError("PDF not found")
        return updated

    def delete_pdf(self, user: Optional[AuthUser], pdf_id: str) -> None:
        _require_user(user, "You must be signed in to delete PDFs")
        document = self.get_document(pdf_id)
        # Database first; a leftover storage object is harmless.
        try:
            self.db.delete_pdf(pdf_id)
        except Exception as exc:
            logger.error("Failed to delete PDF %s: %s", pdf_id, exc)
            raise ServiceError("Failed to delete PDF") from exc
        self._remove_quietly(document.file_path)

    def _remove_quietly(self, path: str) -> None:
        try:
            self.storage.remove([path])
        except Exception as exc:
            logger.error("Storage delete error (non-critical) for %s: %s", path, exc)

    # -- reading ------------------------------------------------------------

    def list_library(self, user: Optional[AuthUser]) -> list[PdfWithProgress]:
        user = _require_user(user, "You must be signed in to view the library")
        progress = {p.document_id: p for p in self.db.list_progress(user.id)}
        return [
            PdfWithProgress(document=document, progress=progress.get(document.id))
            for document in self.db.list_pdfs()
        ]

    def open_document(self, user: Optional[AuthUser], pdf_id: str) -> OpenedDocument:
        user = _require_user(user, "You must be signed in to read PDFs")
        document = self.get_document(pdf_id)
        progress = self.db.get_progress(user.id, pdf_id)
        try:
            signed_url = self.storage.presign_get(
                document.file_path, expires_in=self.signed_url_expires_seconds
            )
        except Exception as exc:
            logger.error("Failed to sign read URL for %s: %s", document.file_path, exc)
            raise ServiceError("Failed to load PDF") from exc
        return OpenedDocument(
            document=document,
            signed_url=signed_url,
            initial_page=progress.current_page if progress else 1,
            progress=progress,
        )

    def record_progress(
        self,
        user: Optional[AuthUser],
        pdf_id: str,
        current_page: int,
        total_pages: int,
    ) -> ReadingSession:
        user = _require_user(user, "You must be signed in to save progress")
        document = self.get_document(pdf_id)
        try:
            session = ReadingSession(
                user_id=user.id,
                document_id=pdf_id,
                current_page=current_page,
                total_pages=total_pages,
                last_read_at=utcnow(),
            )
        except ValueError as exc:
            raise InvalidInputError("Invalid page number") from exc
        try:
            self.db.upsert_progress(session)
            if document.page_count is None:
                self.db.update_pdf(pdf_id, {"page_count": total_pages})
        except Exception as exc:
            logger.error("Failed to save progress for %s: %s", pdf_id, exc)
            raise ServiceError("Failed to save progress") from exc
        return session

    def get_progress(self, user: Optional[AuthUser], pdf_id: str) -> Optional[ReadingSession]:
        user = _require_user(user, "You must be signed in to read progress")
        self.get_document(pdf_id)
        return self.db.get_progress(user.id, pdf_id)
