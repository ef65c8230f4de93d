"""Document data models.

A document is in exactly one of three states, each its own model:

* ``UploadedDocument``: fulfilled, holds a content reference.
* ``RequestedDocument``: outstanding, waiting for an upload.
* ``UpdateRequestedDocument``: fulfilled, with a pending ask for a newer version.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

RequestFrequency = Literal["daily", "monthly", "quarterly", "yearly", "one-time"]
RequestStatus = Literal["pending", "received", "cancelled"]

FREQUENCIES: tuple[str, ...] = ("daily", "monthly", "quarterly", "yearly", "one-time")


def as_utc(value: datetime) -> datetime:
    """Return ``value`` with naive datetimes interpreted as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DocumentBase(BaseModel):
    """Fields shared by every document state.

    Attributes:
        id: Opaque identifier.
        name: Display name, usually a filename or document type.
        type: File type hint such as ``pdf``.
        size: Human readable size such as ``890 KB``.
        folder: Category the document is filed under.
        client_id: Owning client, if any.
        description: Free-text note supplied with the request.
        request_frequency: Recurrence of the obligation.
        due_date: Explicit due date overriding the computed one.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    type: str = ""
    size: str = ""
    folder: str = "Documents"
    client_id: Optional[str] = None
    description: Optional[str] = None
    request_frequency: Optional[RequestFrequency] = None
    due_date: Optional[datetime] = None

    @field_validator("*", mode="after")
    @classmethod
    def _assume_utc(cls, value: object) -> object:
        if isinstance(value, datetime):
            return as_utc(value)
        return value

    @property
    def is_requested(self) -> bool:
        return False

    @property
    def has_update_request(self) -> bool:
        return False

    @property
    def is_fulfilled(self) -> bool:
        return not self.is_requested

    @property
    def timestamp(self) -> datetime:
        """Return the upload time, or the request time while outstanding."""
        raise NotImplementedError


class UploadedDocument(DocumentBase):
    """A fulfilled document."""

    kind: Literal["uploaded"] = "uploaded"
    url: str
    uploaded_by: str
    uploaded_at: datetime

    @property
    def timestamp(self) -> datetime:
        return self.uploaded_at


class RequestedDocument(DocumentBase):
    """An outstanding request with no content yet."""

    kind: Literal["requested"] = "requested"
    requested_by: str
    requested_at: datetime

    @property
    def is_requested(self) -> bool:
        return True

    @property
    def timestamp(self) -> datetime:
        return self.requested_at


class UpdateRequestedDocument(DocumentBase):
    """A fulfilled document for which a newer version has been asked for.

    Attributes:
        update_requested_by: Who asked for the update.
        update_requested_at: When the update was asked for.
        update_request_description: Optional note sent with the ask.
        requested_version: Version label, usually a year such as ``2024``.
    """

    kind: Literal["update_requested"] = "update_requested"
    url: str
    uploaded_by: str
    uploaded_at: datetime
    update_requested_by: str
    update_requested_at: datetime
    update_request_description: Optional[str] = None
    requested_version: Optional[str] = None

    @property
    def has_update_request(self) -> bool:
        return True

    @property
    def timestamp(self) -> datetime:
        return self.uploaded_at


Document = Annotated[
    Union[UploadedDocument, RequestedDocument, UpdateRequestedDocument],
    Field(discriminator="kind"),
]

DOCUMENT_LIST_ADAPTER: TypeAdapter[list[Document]] = TypeAdapter(list[Document])


class DocumentRequest(BaseModel):
    """Snapshot returned when a document is requested."""

    id: str
    document_name: str
    description: Optional[str] = None
    requested_by: str
    requested_at: datetime
    client_id: str
    status: RequestStatus = "pending"
    frequency: RequestFrequency


class UploadedFile(BaseModel):
    """Raw metadata handed over by a file picker or drop zone.

    Attributes:
        name: Filename including extension.
        size: Size in bytes.
        path: Local path used as the content reference, when known.
    """

    name: str
    size: int = Field(default=0, ge=0)
    path: Optional[str] = None


class Client(BaseModel):
    """Read-only client reference data."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    email: str = ""
    pending_updates: int = 0
    unread_messages: int = 0
    last_activity: Optional[datetime] = None


__all__ = [
    "as_utc",
    "RequestFrequency",
    "RequestStatus",
    "FREQUENCIES",
    "DocumentBase",
    "UploadedDocument",
    "RequestedDocument",
    "UpdateRequestedDocument",
    "Document",
    "DOCUMENT_LIST_ADAPTER",
    "DocumentRequest",
    "UploadedFile",
    "Client",
]
