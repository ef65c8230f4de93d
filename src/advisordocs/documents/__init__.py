"""Document models, name heuristics and display helpers.

The stateful ``DocumentStore`` lives in :mod:`advisordocs.documents.store`.
"""

from .matching import (
    extract_year_version,
    names_similar,
    significant_words,
    strip_extension,
    upload_matches_request,
)
from .models import (
    Client,
    Document,
    DocumentRequest,
    RequestedDocument,
    RequestFrequency,
    UpdateRequestedDocument,
    UploadedDocument,
    UploadedFile,
)
from .naming import (
    file_type_hint,
    format_file_size,
    get_base_document_name,
    group_documents_by_base_name,
)

__all__ = [
    "Client",
    "Document",
    "DocumentRequest",
    "RequestedDocument",
    "RequestFrequency",
    "UpdateRequestedDocument",
    "UploadedDocument",
    "UploadedFile",
    "extract_year_version",
    "names_similar",
    "significant_words",
    "strip_extension",
    "upload_matches_request",
    "file_type_hint",
    "format_file_size",
    "get_base_document_name",
    "group_documents_by_base_name",
]
