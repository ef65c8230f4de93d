"""Tests for the in-memory document store."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from advisordocs.config.models import RequestDefaults
from advisordocs.documents.models import (
    RequestedDocument,
    UpdateRequestedDocument,
    UploadedDocument,
    UploadedFile,
)
from advisordocs.documents.store import DocumentStore
from advisordocs.notifications import NotificationLog
from advisordocs.presets import PresetBin, PresetItem, PresetLibrary
from advisordocs.storage import LocalStorage

NOW = datetime(2024, 7, 10, 12, 0, tzinfo=timezone.utc)


def _uploaded(doc_id: str, name: str, **extra) -> UploadedDocument:
    return UploadedDocument(
        id=doc_id,
        name=name,
        type="pdf",
        size="890 KB",
        url=f"local://{doc_id}",
        uploaded_by="Sarah Johnson",
        uploaded_at=datetime(2024, 7, 5, 14, 30, tzinfo=timezone.utc),
        **extra,
    )


def _requested(doc_id: str, name: str, **extra) -> RequestedDocument:
    return RequestedDocument(
        id=doc_id,
        name=name,
        requested_by="John Smith",
        requested_at=datetime(2024, 7, 1, tzinfo=timezone.utc),
        **extra,
    )


def _store(*documents, tmp_path: Path | None = None, log: NotificationLog | None = None):
    presets = PresetLibrary(LocalStorage(tmp_path)) if tmp_path is not None else None
    return DocumentStore(
        documents,
        presets=presets,
        notifier=log if log is not None else NotificationLog(),
        clock=lambda: NOW,
    )


def test_request_without_similar_document_creates_outstanding_record_first() -> None:
    log = NotificationLog()
    store = _store(_uploaded("1", "Q3_Portfolio_Analysis.pdf"), log=log)

    request = store.request_document(
        "  Insurance Policy ",
        requested_by="John Smith",
        client_id="c1",
        frequency="yearly",
        description="Current home policy",
    )

    first = store.documents[0]
    assert isinstance(first, RequestedDocument)
    assert first.id == request.id
    assert first.id.startswith("req-")
    assert first.name == "Insurance Policy"
    assert first.request_frequency == "yearly"
    assert first.folder == "Documents"
    assert first.is_requested and not first.is_fulfilled
    assert len(store.documents) == 2
    assert request.status == "pending"
    assert request.requested_at == NOW
    assert log.titles == ["Document Requested"]


def test_request_similar_to_fulfilled_document_becomes_update_request() -> None:
    existing = _uploaded("1", "Tax Returns 2023.pdf", client_id="c1")
    store = _store(existing)

    request = store.request_document(
        "Tax Returns 2024",
        requested_by="John Smith",
        client_id="c1",
        frequency="yearly",
        description="Please send the latest return",
    )

    assert request.id == "1"
    assert request.document_name == "Tax Returns 2024"
    assert request.status == "pending"
    assert len(store.documents) == 1
    updated = store.get("1")
    assert isinstance(updated, UpdateRequestedDocument)
    assert updated.has_update_request
    assert updated.requested_version == "2024"
    assert updated.update_requested_by == "John Smith"
    assert updated.update_request_description == "Please send the latest return"
    assert updated.url == existing.url
    assert updated.uploaded_at == existing.uploaded_at


def test_request_similar_to_outstanding_request_still_creates_new_record() -> None:
    store = _store(_requested("req-old", "Bank Statement"))

    store.request_document(
        "Bank Statement", requested_by="John Smith", client_id="c1", frequency="monthly"
    )

    assert len(store.outstanding()) == 2


def test_request_without_frequency_uses_configured_default() -> None:
    store = DocumentStore(
        defaults=RequestDefaults(default_frequency="quarterly"), clock=lambda: NOW
    )

    result = store.request_document("Pay Stub", requested_by="John Smith", client_id="c1")

    assert result.frequency == "quarterly"
    assert store.outstanding()[0].request_frequency == "quarterly"


def test_request_blank_name_raises() -> None:
    with pytest.raises(ValueError):
        _store().request_document(
            "   ", requested_by="John Smith", client_id="c1", frequency="monthly"
        )


def test_request_update_ignores_unknown_and_outstanding_documents() -> None:
    outstanding = _requested("req-1", "Pay Stub")
    store = _store(outstanding)

    store.request_document_update("missing", requested_by="John Smith")
    store.request_document_update("req-1", requested_by="John Smith")

    assert store.documents == [outstanding]


def test_update_frequency_keeps_explicit_due_date() -> None:
    due = datetime(2024, 8, 1, tzinfo=timezone.utc)
    store = _store(_requested("req-1", "Pay Stub", request_frequency="monthly", due_date=due))

    store.update_request_frequency("req-1", "quarterly")

    document = store.get("req-1")
    assert document is not None
    assert document.request_frequency == "quarterly"
    assert document.due_date == due


def test_update_due_date_sets_and_clears_override() -> None:
    store = _store(_requested("req-1", "Pay Stub"))

    store.update_document_due_date("req-1", datetime(2024, 9, 1))
    document = store.get("req-1")
    assert document is not None
    assert document.due_date == datetime(2024, 9, 1, tzinfo=timezone.utc)

    store.update_document_due_date("req-1", None)
    cleared = store.get("req-1")
    assert cleared is not None
    assert cleared.due_date is None

    store.update_document_due_date("missing", datetime(2024, 9, 1))


def test_delete_removes_records_without_kind_guard() -> None:
    log = NotificationLog()
    store = _store(_requested("req-1", "Pay Stub"), _uploaded("1", "W-2.pdf"), log=log)

    store.delete_requested_document("req-1")
    store.delete_requested_document("missing")
    store.delete_requested_document("1")

    assert store.documents == []
    assert log.titles == ["Request Deleted", "Request Deleted"]


def test_upload_fulfils_matching_request_in_place() -> None:
    log = NotificationLog()
    store = _store(
        _requested("req-2", "Tax Return"),
        _requested("req-1", "Bank Statement", client_id="c1", request_frequency="monthly"),
        _uploaded("1", "W-2.pdf"),
        log=log,
    )

    result = store.record_upload(
        UploadedFile(name="bank statement.pdf", size=890 * 1024, path="/tmp/bank.pdf"),
        uploaded_by="Sarah Johnson",
        client_id="c1",
    )

    assert [doc.id for doc in store.documents] == ["req-2", "req-1", "1"]
    converted = store.documents[1]
    assert converted == result
    assert isinstance(converted, UploadedDocument)
    assert converted.name == "Bank Statement"
    assert converted.url == "/tmp/bank.pdf"
    assert converted.uploaded_by == "Sarah Johnson"
    assert converted.uploaded_at == NOW
    assert converted.request_frequency == "monthly"
    assert converted.size == "890 KB"
    assert converted.type == "pdf"
    assert not converted.is_requested
    assert log.titles == ["Request Fulfilled"]


def test_upload_without_match_is_inserted_first() -> None:
    store = _store(_requested("req-1", "Tax Return"))

    result = store.record_upload(
        UploadedFile(name="Invoice March.pdf", size=2048), uploaded_by="Sarah Johnson"
    )

    assert store.documents[0] == result
    assert result.id.startswith("doc-")
    assert result.url.startswith("local://")
    assert result.size == "2 KB"
    assert isinstance(store.documents[1], RequestedDocument)


def test_upload_skips_requests_for_other_clients() -> None:
    store = _store(_requested("req-1", "Tax Return", client_id="c2"))

    result = store.record_upload(
        UploadedFile(name="Tax Return.pdf", size=10), uploaded_by="Sarah Johnson", client_id="c1"
    )

    assert result.id != "req-1"
    assert len(store.outstanding()) == 1


def test_search_and_find_similar() -> None:
    log = NotificationLog()
    store = _store(
        _uploaded("1", "Bank_Statement_June.pdf", folder="Statements"),
        _uploaded("2", "Investment Contract Amendment.docx", folder="Contracts"),
        log=log,
    )

    assert [doc.id for doc in store.search("statements")] == ["1"]
    assert len(store.search("  ")) == 2

    found = store.find_similar("Investment Contract")
    assert found is not None and found.id == "2"
    assert store.find_similar("Mortgage Statement") is None
    assert log.titles == ["Document not found"]


def test_apply_preset_deduplicates_names_across_bins(tmp_path: Path) -> None:
    store = _store(tmp_path=tmp_path)
    preset = store.save_preset(
        "Onboarding",
        [
            PresetBin(id="bin-1", label="Monthly Docs", items=[PresetItem(name="Bank Statement")]),
            PresetBin(
                id="bin-2",
                label="Yearly Docs",
                items=[PresetItem(name="bank statement"), PresetItem(name="Tax Return")],
            ),
        ],
    )

    requests = store.apply_preset_to_client(preset.id, client_id="c1", advisor_name="John Smith")

    assert [(r.document_name, r.frequency) for r in requests] == [
        ("Bank Statement", "monthly"),
        ("Tax Return", "yearly"),
    ]
    assert all(r.client_id == "c1" and r.requested_by == "John Smith" for r in requests)
    assert len(store.outstanding()) == 2


def test_apply_unknown_preset_returns_nothing(tmp_path: Path) -> None:
    store = _store(tmp_path=tmp_path)

    assert store.apply_preset_to_client("nope", client_id="c1", advisor_name="John Smith") == []
    assert store.documents == []


def test_preset_operations_require_a_library() -> None:
    with pytest.raises(RuntimeError):
        _store().save_preset("Onboarding", [])


def test_update_and_delete_preset_through_store(tmp_path: Path) -> None:
    store = _store(tmp_path=tmp_path)
    preset = store.save_preset("Onboarding", [])

    renamed = store.update_preset(preset.id, name="Annual review")

    assert renamed is not None and renamed.name == "Annual review"
    assert store.delete_preset(preset.id) is True
    assert store.presets.presets == []
