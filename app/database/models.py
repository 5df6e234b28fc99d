from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

STATUS_UPLOADED = "uploaded"
STATUS_PROCESSING = "processing"
STATUS_PROCESSED = "processed"
STATUS_FAILED = "failed"

TERMINAL_STATUSES = frozenset({STATUS_PROCESSED, STATUS_FAILED})

JOB_PENDING = "pending"
JOB_PROCESSING = "processing"


@dataclass
class Document:
    """Represents a row from the documents table."""

    id: str
    original_name: str
    storage_path: str
    content_type: str = "application/octet-stream"
    size_bytes: int = 0
    transaction_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    status: str = STATUS_UPLOADED
    processing_results: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass
class JobRecord:
    """Represents a row from the ingestion_jobs table."""

    id: str
    document_id: str
    status: str
    attempts: int
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class AuditRecord:
    """Append-only content hash of a document's extracted text and metadata."""

    document_id: str
    content_hash: str
    payload: dict[str, Any]
    created_at: datetime | None = None


@dataclass(frozen=True)
class SearchIndexEntry:
    """Represents a row from the search_index table."""

    document_id: str
    transaction_id: str | None
    content: str
    vector_id: str
    confidence: float
    indexed_at: datetime | None = None
    searchable: bool = False

