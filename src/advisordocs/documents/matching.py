"""Name matching heuristics for requests and uploads."""

from __future__ import annotations

import re
from typing import Optional

_EXTENSION = re.compile(r"\.[^/.]+$")
_YEAR_TOKEN = re.compile(r"\b(?:19|20)\d{2}\b")


def strip_extension(name: str) -> str:
    """Return ``name`` without a trailing ``.ext`` suffix."""
    return _EXTENSION.sub("", name)


def significant_words(name: str, *, min_length: int = 3) -> list[str]:
    """Return the lowercase words of ``name`` that are at least ``min_length`` long.

    The extension is stripped first, so ``"Tax Returns 2023.pdf"`` yields
    ``["tax", "returns", "2023"]``.
    """
    base = strip_extension(name.lower())
    return [word for word in base.split() if len(word) >= min_length]


def names_similar(
    existing: str,
    requested: str,
    *,
    min_length: int = 3,
    min_overlap: int = 2,
    ratio: float = 0.6,
) -> bool:
    """Return whether two document names refer to the same kind of document.

    Counts the significant words of ``existing`` that also occur in
    ``requested`` and accepts when the count reaches
    ``min(min_overlap, ratio * max(len(existing_words), len(requested_words)))``.
    Names with no significant words never match.

    Args:
        existing: Name of a document already on file.
        requested: Name being requested.
        min_length: Shortest word counted as significant.
        min_overlap: Overlap that always suffices.
        ratio: Fraction of the longer word list that suffices.

    Returns:
        bool: True when the names are similar.
    """
    existing_words = significant_words(existing, min_length=min_length)
    requested_words = significant_words(requested, min_length=min_length)
    if not existing_words or not requested_words:
        return False

    shared = sum(1 for word in existing_words if word in requested_words)
    threshold = min(min_overlap, max(len(existing_words), len(requested_words)) * ratio)
    return shared >= threshold


def upload_matches_request(filename: str, request_name: str) -> bool:
    """Return whether an uploaded file fulfils an outstanding request.

    The file stem and the request name are compared case-insensitively; either
    containing the other is a match.
    """
    stem = strip_extension(filename).strip().lower()
    target = request_name.strip().lower()
    if not stem or not target:
        return False
    return stem in target or target in stem


def extract_year_version(name: str) -> Optional[str]:
    """Return the first four-digit year (19xx or 20xx) found in ``name``."""
    match = _YEAR_TOKEN.search(name)
    return match.group(0) if match else None


__all__ = [
    "strip_extension",
    "significant_words",
    "names_similar",
    "upload_matches_request",
    "extract_year_version",
]
