"""Next-due-date computation for recurring document requests."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

from advisordocs.documents.models import Document, RequestFrequency, as_utc

_MONTH_STEPS = {"monthly": 1, "quarterly": 3, "yearly": 12}


class DueStatus(str, Enum):
    """Classification of a due date relative to now."""

    OVERDUE = "overdue"
    DUE_SOON = "due soon"


@dataclass(frozen=True)
class DueEntry:
    """A document paired with its computed due date."""

    document: Document
    due: datetime


def add_months(value: datetime, months: int) -> datetime:
    """Shift ``value`` by whole calendar months.

    The day is clamped to the length of the target month, so January 31st plus
    one month lands on the last day of February.
    """
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def get_next_due_date(
    anchor: datetime,
    frequency: Optional[RequestFrequency] = None,
    explicit: Optional[datetime] = None,
) -> Optional[datetime]:
    """Return the next due date for an obligation.

    Args:
        anchor: Upload or request time the schedule starts from.
        frequency: Recurrence; ``None`` or ``"one-time"`` means no schedule.
        explicit: Override that always wins when present.

    Returns:
        Optional[datetime]: The due date, or ``None`` when nothing is due.
    """
    if explicit is not None:
        return explicit
    if frequency is None or frequency == "one-time":
        return None
    if frequency == "daily":
        return anchor + timedelta(days=1)
    return add_months(anchor, _MONTH_STEPS[frequency])


def document_due_date(document: Document) -> Optional[datetime]:
    """Return the due date for ``document`` anchored on its timestamp."""
    return get_next_due_date(document.timestamp, document.request_frequency, document.due_date)


def classify(due: datetime, now: datetime, *, window_days: int = 14) -> Optional[DueStatus]:
    """Return ``OVERDUE``, ``DUE_SOON`` (within ``window_days``) or ``None``."""
    due = as_utc(due)
    now = as_utc(now)
    if due < now:
        return DueStatus.OVERDUE
    if due <= now + timedelta(days=window_days):
        return DueStatus.DUE_SOON
    return None


def due_entries(documents: Iterable[Document]) -> list[DueEntry]:
    """Return entries for every document with a computable due date."""
    entries = []
    for document in documents:
        due = document_due_date(document)
        if due is not None:
            entries.append(DueEntry(document=document, due=due))
    return entries


__all__ = [
    "DueStatus",
    "DueEntry",
    "add_months",
    "get_next_due_date",
    "document_due_date",
    "classify",
    "due_entries",
]
