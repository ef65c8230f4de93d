"""Read-only session seeds: the documents and clients a session starts with."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import TypeAdapter, ValidationError

from advisordocs.documents.models import DOCUMENT_LIST_ADAPTER, Client, Document

_CLIENT_LIST = TypeAdapter(list[Client])


class SessionError(Exception):
    """Raised when a session seed file is missing or malformed."""


@dataclass
class Session:
    """Seed data for one document store."""

    documents: list[Document] = field(default_factory=list)
    clients: list[Client] = field(default_factory=list)


def load_session(path: Path) -> Session:
    """Load documents and clients from a YAML seed file.

    The file holds a mapping with optional ``documents`` and ``clients`` lists.
    Each document carries a ``kind`` of ``uploaded``, ``requested`` or
    ``update_requested``.

    Raises:
        SessionError: If the file cannot be read, parsed or validated.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise SessionError(f"Unable to read session file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise SessionError(f"Invalid YAML in session file {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise SessionError("Session file must contain a mapping at the top level.")

    try:
        documents = DOCUMENT_LIST_ADAPTER.validate_python(raw.get("documents") or [])
        clients = _CLIENT_LIST.validate_python(raw.get("clients") or [])
    except ValidationError as exc:
        raise SessionError(f"Invalid session data in {path}: {exc}") from exc

    return Session(documents=documents, clients=clients)


__all__ = ["Session", "SessionError", "load_session"]
