"""Due-date scheduling helpers."""

from .due_dates import (
    DueEntry,
    DueStatus,
    add_months,
    classify,
    document_due_date,
    due_entries,
    get_next_due_date,
)

__all__ = [
    "DueEntry",
    "DueStatus",
    "add_months",
    "classify",
    "document_due_date",
    "due_entries",
    "get_next_due_date",
]
