from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from backend.db import DbClient
from shared.errors import (
    InvalidInputError,
    NotAuthenticatedError,
    NotFoundError,
    ServiceError,
)
from shared.types import AuthUser, QuickRef, utcnow
from shared.validation import blank_to_none

logger = logging.getLogger(__name__)

OPTIONAL_FIELDS = ("content", "link", "tag")


@dataclass
class QuickRefService:
    """Short reference snippets (commands, links) shown on the quick-ref page."""

    db: DbClient

    def list_refs(self) -> list[QuickRef]:
        return self.db.list_quick_refs()

    def create_ref(
        self,
        user: Optional[AuthUser],
        name: str,
        content: Optional[str] = None,
        link: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> QuickRef:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to add quick refs")
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Name is required")
        now = utcnow()
        ref = QuickRef(
            id=uuid.uuid4().hex,
            name=name,
            content=blank_to_none(content),
            link=blank_to_none(link),
            tag=blank_to_none(tag),
            created_at=now,
            updated_at=now,
        )
        try:
            return self.db.create_quick_ref(ref)
        except Exception as exc:
            logger.error("Failed to save quick ref %s: %s", name, exc)
            raise ServiceError("Failed to save quick ref") from exc

    def update_ref(self, user: Optional[AuthUser], ref_id: str, changes: dict) -> QuickRef:
        """Apply only the keys present in ``changes``; ``updated_at`` always advances."""
        if user is None:
            raise NotAuthenticatedError("You must be signed in to edit quick refs")
        fields = {}
        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise InvalidInputError("Name is required")
            fields["name"] = name
        for key in OPTIONAL_FIELDS:
            if key in changes:
                fields[key] = blank_to_none(changes[key])
        fields["updated_at"] = utcnow()
        try:
            updated = self.db.update_quick_ref(ref_id, fields)
        except Exception as exc:
            logger.error("Failed to update quick ref %s: %s", ref_id, exc)
            raise ServiceError("Failed to update quick ref") from exc
        if updated is None:
            raise NotFoundError("Quick ref not found")
        return updated

    def delete_ref(self, user: Optional[AuthUser], ref_id: str) -> None:
        if user is None:
            raise NotAuthenticatedError("You must be signed in to delete quick refs")
        try:
            deleted = self.db.delete_quick_ref(ref_id)
        except Exception as exc:
            logger.error("Failed to delete quick ref %s: %s", ref_id, exc)
            raise ServiceError("Failed to delete quick ref") from exc
        if not deleted:
            raise NotFoundError("Quick ref not found")
