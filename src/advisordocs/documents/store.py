"""In-memory document store holding requests, uploads and update requests."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional
from uuid import uuid4

from advisordocs.config.models import AdvisorDocsConfig, MatchingSettings, RequestDefaults
from advisordocs.notifications import Notification, Notifier, discard
from advisordocs.presets import DocumentPreset, PresetLibrary
from advisordocs.presets.library import BinInput
from advisordocs.storage import LocalStorage

from .matching import extract_year_version, names_similar, upload_matches_request
from .models import (
    Document,
    DocumentRequest,
    RequestedDocument,
    RequestFrequency,
    UpdateRequestedDocument,
    UploadedDocument,
    UploadedFile,
    as_utc,
)
from .naming import file_type_hint, format_file_size

LOGGER = logging.getLogger(__name__)

_UPDATE_FIELDS = {
    "kind",
    "update_requested_by",
    "update_requested_at",
    "update_request_description",
    "requested_version",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


class DocumentStore:
    """Single source of truth for the documents of one session.

    Documents are kept most recent first. Operations addressing an unknown id
    are no-ops. Expected outcomes are reported to ``notifier``.
    """

    def __init__(
        self,
        documents: Iterable[Document] = (),
        *,
        presets: Optional[PresetLibrary] = None,
        matching: Optional[MatchingSettings] = None,
        defaults: Optional[RequestDefaults] = None,
        notifier: Notifier = discard,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Create a store seeded with ``documents``.

        Args:
            documents: Initial records, most recent first.
            presets: Preset library used by the preset operations.
            matching: Thresholds for the similar-name test.
            defaults: Folder and requester defaults for new records.
            notifier: Sink for user-facing notifications.
            clock: Source of the current time.
        """
        self._documents: list[Document] = list(documents)
        self._presets = presets
        self._matching = matching or MatchingSettings()
        self._defaults = defaults or RequestDefaults()
        self._notify = notifier
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: AdvisorDocsConfig,
        documents: Iterable[Document] = (),
        *,
        notifier: Notifier = discard,
    ) -> "DocumentStore":
        """Build a store whose presets live in the configured local storage."""
        storage = LocalStorage(config.storage.directory)
        library = PresetLibrary(storage, key=config.storage.presets_key)
        return cls(
            documents,
            presets=library,
            matching=config.matching,
            defaults=config.requests,
            notifier=notifier,
        )

    # ------------------------------------------------------------------ #
    # Queries                                                            #
    # ------------------------------------------------------------------ #

    @property
    def documents(self) -> list[Document]:
        return list(self._documents)

    def get(self, document_id: str) -> Optional[Document]:
        return next((doc for doc in self._documents if doc.id == document_id), None)

    def outstanding(self) -> list[RequestedDocument]:
        return [doc for doc in self._documents if isinstance(doc, RequestedDocument)]

    def fulfilled(self) -> list[Document]:
        return [doc for doc in self._documents if doc.is_fulfilled]

    def pending_updates(self) -> list[UpdateRequestedDocument]:
        return [doc for doc in self._documents if isinstance(doc, UpdateRequestedDocument)]

    def for_client(self, client_id: str) -> list[Document]:
        return [doc for doc in self._documents if doc.client_id == client_id]

    def search(self, term: str) -> list[Document]:
        """Return documents whose name or folder contains ``term`` (case-insensitive)."""
        needle = term.strip().lower()
        if not needle:
            return self.documents
        return [
            doc
            for doc in self._documents
            if needle in doc.name.lower() or needle in doc.folder.lower()
        ]

    def find_similar(self, name: str) -> Optional[Document]:
        """Return the first document whose name loosely matches ``name``.

        Sends a "Document not found" notification when nothing matches.
        """
        for document in self._documents:
            if self._similar(document.name, name) or upload_matches_request(name, document.name):
                return document
        self._notify(
            Notification(
                title="Document not found",
                description=f"No document resembling {name!r} is on file.",
                level="warning",
            )
        )
        return None

    # ------------------------------------------------------------------ #
    # Requests                                                           #
    # ------------------------------------------------------------------ #

    def request_document(
        self,
        document_name: str,
        *,
        requested_by: str,
        client_id: str,
        frequency: Optional[RequestFrequency] = None,
        description: Optional[str] = None,
    ) -> DocumentRequest:
        """Request a document from a client.

        If a fulfilled document with a similar name already exists, an update
        request is attached to it instead of creating a duplicate placeholder.
        Otherwise a new outstanding record is inserted first in the list.

        Args:
            document_name: Name of the requested document.
            requested_by: Advisor asking for the document.
            client_id: Client the request is addressed to.
            frequency: Recurrence of the obligation; defaults to the
                configured ``requests.default_frequency``.
            description: Optional note for the client.

        Returns:
            DocumentRequest: Pending request view. Its id is the matched
            document's id when the request became an update request.

        Raises:
            ValueError: If ``document_name`` is blank.
        """
        name = document_name.strip()
        if not name:
            raise ValueError("document_name must not be blank")
        frequency = frequency or self._defaults.default_frequency
        now = self._clock()

        existing = next(
            (doc for doc in self._documents if doc.is_fulfilled and self._similar(doc.name, name)),
            None,
        )
        if existing is not None:
            LOGGER.info("Request for %r matches existing document %s", name, existing.id)
            self.request_document_update(
                existing.id,
                requested_by=requested_by,
                description=description,
                requested_version=extract_year_version(name),
            )
            document_id = existing.id
        else:
            document = RequestedDocument(
                id=_new_id("req"),
                name=name,
                folder=self._defaults.default_folder,
                client_id=client_id,
                description=description,
                request_frequency=frequency,
                requested_by=requested_by,
                requested_at=now,
            )
            self._documents.insert(0, document)
            document_id = document.id
            LOGGER.info("Created request %s for %r (%s)", document.id, name, frequency)
            self._notify(
                Notification(
                    title="Document Requested",
                    description=f'Request for "{name}" ({frequency}) has been sent to the client',
                )
            )

        return DocumentRequest(
            id=document_id,
            document_name=name,
            description=description,
            requested_by=requested_by,
            requested_at=now,
            client_id=client_id,
            status="pending",
            frequency=frequency,
        )

    def request_document_update(
        self,
        document_id: str,
        *,
        requested_by: str,
        description: Optional[str] = None,
        requested_version: Optional[str] = None,
    ) -> None:
        """Ask for a newer version of a fulfilled document.

        Unknown ids and outstanding documents are left untouched.
        """
        index = self._index_of(document_id)
        if index is None:
            LOGGER.debug("Ignoring update request for unknown document %s", document_id)
            return
        target = self._documents[index]
        if not target.is_fulfilled:
            LOGGER.warning("Document %s is still outstanding; update request ignored", document_id)
            return

        data = target.model_dump(exclude=_UPDATE_FIELDS)
        data.update(
            update_requested_by=requested_by,
            update_requested_at=self._clock(),
            update_request_description=description,
            requested_version=requested_version,
        )
        self._documents[index] = UpdateRequestedDocument.model_validate(data)
        version = f" ({requested_version} version)" if requested_version else ""
        self._notify(
            Notification(
                title="Update Requested",
                description=f"Update request sent for {target.name}{version}",
            )
        )

    def update_request_frequency(self, document_id: str, frequency: RequestFrequency) -> None:
        """Change the recurrence of a document; explicit due dates are kept."""
        self._replace(document_id, request_frequency=frequency)

    def update_document_due_date(self, document_id: str, due_date: Optional[datetime]) -> None:
        """Set, or clear with ``None``, the explicit due date of a document."""
        self._replace(document_id, due_date=as_utc(due_date) if due_date else None)

    def delete_requested_document(self, document_id: str) -> None:
        """Remove a document by id.

        Intended for outstanding requests; fulfilled documents are removed too
        but the deletion is logged as a warning.
        """
        index = self._index_of(document_id)
        if index is None:
            LOGGER.debug("Ignoring delete for unknown document %s", document_id)
            return
        removed = self._documents.pop(index)
        if removed.is_fulfilled:
            LOGGER.warning("Deleted fulfilled document %s (%s)", removed.id, removed.name)
        self._notify(
            Notification(
                title="Request Deleted",
                description=f"Request for {removed.name} has been deleted.",
            )
        )

    # ------------------------------------------------------------------ #
    # Uploads                                                            #
    # ------------------------------------------------------------------ #

    def record_upload(
        self,
        file: UploadedFile,
        *,
        uploaded_by: str,
        client_id: Optional[str] = None,
        folder: Optional[str] = None,
    ) -> UploadedDocument:
        """Record an uploaded file, fulfilling a matching outstanding request.

        The first outstanding request whose name contains the file stem, or is
        contained in it, is converted in place. Requests addressed to another
        client are skipped when ``client_id`` is given. Without a match a new
        document is inserted first in the list.
        """
        now = self._clock()
        content_ref = file.path or f"local://{uuid4().hex}"
        upload_fields: dict[str, Any] = {
            "url": content_ref,
            "uploaded_by": uploaded_by,
            "uploaded_at": now,
            "type": file_type_hint(file.name),
            "size": format_file_size(file.size),
        }

        for index, document in enumerate(self._documents):
            if not isinstance(document, RequestedDocument):
                continue
            if client_id and document.client_id and document.client_id != client_id:
                continue
            if not upload_matches_request(file.name, document.name):
                continue

            data = document.model_dump(exclude={"kind", "requested_by", "requested_at"})
            data.update(upload_fields)
            if folder:
                data["folder"] = folder
            if client_id and not data.get("client_id"):
                data["client_id"] = client_id
            fulfilled = UploadedDocument.model_validate(data)
            self._documents[index] = fulfilled
            LOGGER.info("Upload %r fulfilled request %s", file.name, document.id)
            self._notify(
                Notification(
                    title="Request Fulfilled",
                    description=f"{file.name} fulfils the request for {document.name}.",
                )
            )
            return fulfilled

        uploaded = UploadedDocument(
            id=_new_id("doc"),
            name=file.name,
            folder=folder or self._defaults.default_folder,
            client_id=client_id,
            **upload_fields,
        )
        self._documents.insert(0, uploaded)
        LOGGER.info("Stored new upload %s (%s)", uploaded.id, file.name)
        self._notify(
            Notification(
                title="File Uploaded",
                description=f"{file.name} has been uploaded successfully.",
            )
        )
        return uploaded

    # ------------------------------------------------------------------ #
    # Presets                                                            #
    # ------------------------------------------------------------------ #

    @property
    def presets(self) -> PresetLibrary:
        if self._presets is None:
            raise RuntimeError("This store was created without a preset library.")
        return self._presets

    def save_preset(self, name: str, bins: Iterable[BinInput]) -> DocumentPreset:
        return self.presets.save(name, bins)

    def update_preset(
        self,
        preset_id: str,
        *,
        name: Optional[str] = None,
        bins: Optional[Iterable[BinInput]] = None,
    ) -> Optional[DocumentPreset]:
        return self.presets.update(preset_id, name=name, bins=bins)

    def delete_preset(self, preset_id: str) -> bool:
        return self.presets.delete(preset_id)

    def apply_preset_to_client(
        self,
        preset_id: str,
        *,
        client_id: str,
        advisor_name: str,
    ) -> list[DocumentRequest]:
        """Request every document type of a preset from one client.

        Names are de-duplicated case-insensitively across all bins; the first
        occurrence decides the frequency, which is inferred from its bin label.
        """
        preset = self.presets.get(preset_id)
        if preset is None:
            LOGGER.debug("Ignoring unknown preset %s", preset_id)
            return []

        seen: set[str] = set()
        requests = []
        for bin_ in preset.bins:
            frequency = bin_.frequency
            for item in bin_.items:
                key = item.name.lower()
                if key in seen or not item.name.strip():
                    continue
                seen.add(key)
                requests.append(
                    self.request_document(
                        item.name,
                        requested_by=advisor_name,
                        client_id=client_id,
                        frequency=frequency,
                    )
                )
        LOGGER.info(
            "Applied preset %s to client %s: %d requests", preset_id, client_id, len(requests)
        )
        return requests

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _similar(self, existing: str, requested: str) -> bool:
        return names_similar(
            existing,
            requested,
            min_length=self._matching.min_word_length,
            min_overlap=self._matching.min_overlap,
            ratio=self._matching.overlap_ratio,
        )

    def _index_of(self, document_id: str) -> Optional[int]:
        for index, document in enumerate(self._documents):
            if document.id == document_id:
                return index
        return None

    def _replace(self, document_id: str, **changes: Any) -> None:
        index = self._index_of(document_id)
        if index is None:
            LOGGER.debug("Ignoring change for unknown document %s", document_id)
            return
        self._documents[index] = self._documents[index].model_copy(update=changes)


__all__ = ["DocumentStore"]
