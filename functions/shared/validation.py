"""
Input cleaning and limits shared by the API services and the reader.
"""

from __future__ import annotations

import re
from typing import Optional

from shared.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_NOTE_LENGTH,
    MAX_TITLE_LENGTH,
)
from shared.errors import InvalidInputError


def clean_note_content(content: Optional[str]) -> str:
    """Return trimmed note content or raise InvalidInputError."""
    trimmed = (content or "").strip()
    if not trimmed:
        raise InvalidInputError("Note content is required")
    if len(trimmed) > MAX_NOTE_LENGTH:
        raise InvalidInputError(
            f"Note content must be less than {MAX_NOTE_LENGTH} characters"
        )
    return trimmed


def check_page_number(page_number: int) -> int:
    if page_number < 1:
        raise InvalidInputError("Invalid page number")
    return page_number


def clean_title(title: Optional[str], max_length: int = MAX_TITLE_LENGTH) -> str:
    trimmed = (title or "").strip()
    if not trimmed:
        raise InvalidInputError("Title is required")
    if len(trimmed) > max_length:
        raise InvalidInputError(f"Title must be less than {max_length} characters")
    return trimmed


def clean_description(description: Optional[str]) -> Optional[str]:
    trimmed = (description or "").strip()
    if len(trimmed) > MAX_DESCRIPTION_LENGTH:
        raise InvalidInputError(
            f"Description must be less than {MAX_DESCRIPTION_LENGTH} characters"
        )
    return trimmed or None


def blank_to_none(value: Optional[str]) -> Optional[str]:
    trimmed = (value or "").strip()
    return trimmed or None


def slugify(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
