"""
PDF page counting via pypdf.

Rendering stays with whatever surface displays the page; the reading core
only needs the page count and whether the document opened at all.
"""

from __future__ import annotations

import io

from pypdf import PdfReader
from pypdf.errors import PdfReadError


class DocumentLoadError(Exception):
    pass


def count_pages(pdf_bytes: bytes) -> int:
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        total = len(reader.pages)
    except (PdfReadError, ValueError, OSError) as exc:
        raise DocumentLoadError(str(exc)) from exc
    if total < 1:
        raise DocumentLoadError("Document has no pages")
    return total
