"""Tests for the request and upload name matching heuristics."""

from __future__ import annotations

import pytest

from advisordocs.documents.matching import (
    extract_year_version,
    names_similar,
    significant_words,
    strip_extension,
    upload_matches_request,
)


def test_strip_extension_removes_only_the_last_suffix() -> None:
    assert strip_extension("Tax Returns 2023.pdf") == "Tax Returns 2023"
    assert strip_extension("archive.tar.gz") == "archive.tar"
    assert strip_extension("No Extension") == "No Extension"


def test_significant_words_drops_short_words_and_extension() -> None:
    assert significant_words("Tax Returns of 2023.pdf") == ["tax", "returns", "2023"]
    assert significant_words("ID") == []


@pytest.mark.parametrize(
    ("existing", "requested", "expected"),
    [
        ("Tax Returns 2023.pdf", "Tax Returns 2024", True),
        ("Bank Statement June.pdf", "bank statement", True),
        ("W-2.pdf", "W-2", True),
        ("Bank Statement.pdf", "Insurance Policy", False),
        ("Pay Stub", "Stub", False),
    ],
)
def test_names_similar_uses_word_overlap(existing: str, requested: str, expected: bool) -> None:
    assert names_similar(existing, requested) is expected


def test_names_similar_requires_significant_words_on_both_sides() -> None:
    assert names_similar("ID", "ID") is False
    assert names_similar("Passport ID.pdf", "ID") is False


def test_names_similar_honours_custom_thresholds() -> None:
    assert names_similar("Pay Stub", "Stub", min_overlap=1) is True
    assert names_similar("Tax Returns 2023", "Tax Returns 2024", min_overlap=3, ratio=1.0) is False


def test_upload_matches_request_in_both_directions() -> None:
    assert upload_matches_request("bank statement.pdf", "Bank Statement June")
    assert upload_matches_request("Bank Statement June 2024.pdf", "Bank Statement")
    assert not upload_matches_request("invoice.pdf", "Tax Return")
    assert not upload_matches_request(".pdf", "Tax Return")


def test_extract_year_version_finds_first_year_token() -> None:
    assert extract_year_version("Tax Returns 2024") == "2024"
    assert extract_year_version("Statements 1999 and 2001") == "1999"
    assert extract_year_version("Form 1099") is None
    assert extract_year_version("Statement 20245") is None
