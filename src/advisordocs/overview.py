"""Practice-wide summaries: due lists, per-client rows and calendar buckets."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Collection, Iterable, Optional, Sequence

from advisordocs.documents.models import Client, Document, RequestedDocument
from advisordocs.scheduling import DueEntry, DueStatus, classify, due_entries


@dataclass(frozen=True)
class ClientSummary:
    """Counts shown for one client in the overview table."""

    client: Client
    documents_count: int
    pending_updates: int
    unread_messages: int
    due_soon: int
    overdue: int


@dataclass(frozen=True)
class CalendarEvent:
    """A document due on a given day."""

    id: str
    title: str
    day: date


@dataclass
class Overview:
    """Aggregated due-date state for a set of documents."""

    overdue: list[DueEntry] = field(default_factory=list)
    due_soon: list[DueEntry] = field(default_factory=list)
    pending_requests: list[RequestedDocument] = field(default_factory=list)
    upcoming: list[DueEntry] = field(default_factory=list)
    client_rows: list[ClientSummary] = field(default_factory=list)


def _split_by_status(
    entries: Iterable[DueEntry], now: datetime, window_days: int
) -> tuple[list[DueEntry], list[DueEntry]]:
    overdue, due_soon = [], []
    for entry in entries:
        status = classify(entry.due, now, window_days=window_days)
        if status is DueStatus.OVERDUE:
            overdue.append(entry)
        elif status is DueStatus.DUE_SOON:
            due_soon.append(entry)
    return overdue, due_soon


def build_overview(
    documents: Sequence[Document],
    clients: Sequence[Client],
    now: datetime,
    *,
    due_soon_days: int = 14,
    upcoming_limit: int = 8,
) -> Overview:
    """Compute the overview for ``documents`` as of ``now``.

    Args:
        documents: Documents of the session.
        clients: Clients to build table rows for, in display order.
        now: Reference time for overdue/due-soon classification.
        due_soon_days: Width of the due-soon window.
        upcoming_limit: Maximum number of upcoming entries.

    Returns:
        Overview: Due lists, pending requests and one row per client.
    """
    entries = due_entries(documents)
    overdue, due_soon = _split_by_status(entries, now, due_soon_days)

    rows = []
    for client in clients:
        owned = [doc for doc in documents if doc.client_id == client.id]
        client_overdue, client_due_soon = _split_by_status(
            due_entries(owned), now, due_soon_days
        )
        rows.append(
            ClientSummary(
                client=client,
                documents_count=len(owned),
                pending_updates=client.pending_updates,
                unread_messages=client.unread_messages,
                due_soon=len(client_due_soon),
                overdue=len(client_overdue),
            )
        )

    return Overview(
        overdue=overdue,
        due_soon=due_soon,
        pending_requests=[doc for doc in documents if isinstance(doc, RequestedDocument)],
        upcoming=sorted(entries, key=lambda entry: entry.due)[:upcoming_limit],
        client_rows=rows,
    )


def calendar_events(
    documents: Iterable[Document],
    client_ids: Optional[Collection[str]] = None,
) -> dict[date, list[CalendarEvent]]:
    """Bucket due documents by calendar day, optionally for some clients only."""
    if client_ids:
        documents = [doc for doc in documents if doc.client_id in client_ids]

    events: dict[date, list[CalendarEvent]] = {}
    for entry in due_entries(documents):
        day = entry.due.date()
        events.setdefault(day, []).append(
            CalendarEvent(id=entry.document.id, title=entry.document.name, day=day)
        )
    return dict(sorted(events.items()))


__all__ = ["ClientSummary", "CalendarEvent", "Overview", "build_overview", "calendar_events"]
