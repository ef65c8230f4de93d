"""Display helpers: base-name grouping and file metadata formatting."""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Iterable

from .models import Document

_MONTH_ABBR = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"
_MONTH_FULL = (
    "January|February|March|April|May|June|July|August|September|October|November|December"
)

# Trailing period tokens; each may be followed by an extension such as ".pdf".
_MONTHLY_PATTERNS = (
    re.compile(rf"\s+\d{{4}}\s+(?:{_MONTH_ABBR})\.?\w*$"),
    re.compile(rf"\s+(?:{_MONTH_FULL})\s+\d{{4}}\.?\w*$"),
)
_QUARTERLY_PATTERN = re.compile(r"\s+Q[1-4]\s+\d{4}\.?\w*$")
_YEARLY_PATTERN = re.compile(r"\s+\d{4}\.?\w*$")

# Anywhere in the name, used when no recurrence is known.
_LOOSE_PATTERNS = (
    re.compile(r"\s+20\d{2}"),
    re.compile(rf"\s+(?:{_MONTH_ABBR})"),
    re.compile(r"\s+Q[1-4]"),
)
_WHITESPACE = re.compile(r"\s+")


def get_base_document_name(document: Document) -> str:
    """Return the document name without its time-period suffix.

    ``Bank Statement June 2024.pdf`` with a monthly frequency becomes
    ``Bank Statement``, so monthly instances group together.
    """
    name = document.name
    frequency = document.request_frequency

    if frequency == "monthly":
        base = name
        for pattern in _MONTHLY_PATTERNS:
            base = pattern.sub("", base)
    elif frequency == "quarterly":
        base = _QUARTERLY_PATTERN.sub("", name)
    elif frequency == "yearly":
        base = _YEARLY_PATTERN.sub("", name)
    else:
        base = name
        for pattern in _LOOSE_PATTERNS:
            base = pattern.sub("", base)

    base = _WHITESPACE.sub(" ", base).strip()
    if not base or base == name:
        return name
    return base


def group_documents_by_base_name(documents: Iterable[Document]) -> dict[str, list[Document]]:
    """Group documents sharing a base name, newest first within each group.

    Groups keep the order in which their first member was seen.
    """
    groups: dict[str, list[Document]] = {}
    for document in documents:
        groups.setdefault(get_base_document_name(document), []).append(document)
    for members in groups.values():
        members.sort(key=lambda item: item.timestamp, reverse=True)
    return groups


def format_file_size(num_bytes: int) -> str:
    """Return a short size label such as ``890 KB`` or ``2.4 MB``."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{round(num_bytes / 1024)} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"


def file_type_hint(filename: str) -> str:
    """Return the lowercase extension of ``filename`` without the dot."""
    return PurePath(filename).suffix.lstrip(".").lower()


__all__ = [
    "get_base_document_name",
    "group_documents_by_base_name",
    "format_file_size",
    "file_type_hint",
]
