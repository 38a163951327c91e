"""
HTTP client for the site API, used by viewers running outside the server.

Implements both ProgressStore and NotesBackend so a ViewerSession can be
pointed at a remote deployment.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

import requests

from shared.errors import (
    AppError,
    AuthorizationError,
    InvalidInputError,
    NotAuthenticatedError,
    NotFoundError,
    ServiceError,
)
from shared.types import Note, ReadingSession

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds

_STATUS_ERRORS = {
    400: InvalidInputError,
    401: NotAuthenticatedError,
    403: AuthorizationError,
    404: NotFoundError,
    422: InvalidInputError,
}


def _parse_note(payload: dict) -> Note:
    return Note(
        id=payload["id"],
        document_id=payload["document_id"],
        user_id=payload["user_id"],
        page_number=payload["page_number"],
        content=payload["content"],
        created_at=datetime.fromisoformat(payload["created_at"]),
        updated_at=datetime.fromisoformat(payload["updated_at"]),
    )


class ApiClient:
    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        session: Any = None,
        api_prefix: str = "/api",
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/") + api_prefix
        self.access_token = access_token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise ServiceError() from exc

        if response.status_code >= 400:
            raise self._error_for(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_for(response) -> AppError:
        detail = None
        try:
            detail = response.json().get("detail")
        except ValueError:
            pass
        if not isinstance(detail, str):
            detail = None
        error_cls = _STATUS_ERRORS.get(response.status_code, ServiceError)
        if error_cls is ServiceError:
            logger.error("API returned %s: %s", response.status_code, detail)
            return ServiceError()
        return error_cls(detail)

    # -- progress -------------------------------------------------------------

    def upsert_progress(self, session: ReadingSession) -> None:
        self._request(
            "PUT",
            f"/library/{session.document_id}/progress",
            json={
                "current_page": session.current_page,
                "total_pages": session.total_pages,
            },
        )

    def get_progress(self, document_id: str) -> Optional[dict]:
        payload = self._request("GET", f"/library/{document_id}/progress")
        return payload.get("progress") if payload else None

    # -- notes ------------------------------------------------------------------

    def list_notes(self, document_id: str, page_number: int) -> list[Note]:
        payload = self._request(
            "GET", f"/library/{document_id}/notes", params={"page": page_number}
        )
        return [_parse_note(item) for item in payload["notes"]]

    def create_note(self, document_id: str, page_number: int, content: str) -> Note:
        payload = self._request(
            "POST",
            f"/library/{document_id}/notes",
            json={"page_number": page_number, "content": content},
        )
        return _parse_note(payload)

    def update_note(self, note_id: str, content: str) -> Note:
        payload = self._request(
            "PATCH", f"/notes/{note_id}", json={"content": content}
        )
        return _parse_note(payload)

    def delete_note(self, note_id: str) -> None:
        self._request("DELETE", f"/notes/{note_id}")
