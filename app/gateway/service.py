import uuid
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, BinaryIO

from app.audit.recorder import AuditRecorder
from app.database.exceptions import DocumentNotFoundError
from app.database.models import AuditRecord, Document
from app.database.repositories.documents_repository import DocumentsRepository
from app.gateway.exceptions import NotFoundError, PayloadTooLargeError, ValidationError
from app.gateway.models import HealthReport, UploadReceipt
from app.logging.logger import Log
from app.rag.models import QueryAnswer
from app.rag.query_agent import RagQueryAgent
from app.storage.base import BaseBlobStore
from app.storage.exceptions import BlobNotFoundError
from app.storage.local_blob_store import document_blob_path


def safe_file_name(file_name: str | None) -> str:
    """Strip directory components a client may send in the multipart filename."""
    if not file_name:
        return ""
    cleaned = file_name.replace("\x00", "").replace("\\", "/")
    return PurePosixPath(cleaned).name.strip()


def contains_nul(value: Any) -> bool:
    """True if a NUL character appears anywhere in a JSON-like value, keys included."""
    if isinstance(value, str):
        return "\x00" in value
    if isinstance(value, dict):
        return any(contains_nul(key) or contains_nul(item) for key, item in value.items())
    if isinstance(value, list):
        return any(contains_nul(item) for item in value)
    return False


class DocumentGateway:
    """Coordinates uploads, status lookups, downloads and queries.

    Holds no per-request state; every collaborator is injected.
    """

    def __init__(
        self,
        *,
        doc_repo: DocumentsRepository,
        blob_store: BaseBlobStore,
        query_agent: RagQueryAgent,
        audit_recorder: AuditRecorder,
        database_ping: Callable[[], bool],
        max_upload_bytes: int = 10 * 1024 * 1024,
        upload_chunk_bytes: int = 64 * 1024,
    ) -> None:
        self._doc_repo = doc_repo
        self._blob_store = blob_store
        self._query_agent = query_agent
        self._audit_recorder = audit_recorder
        self._database_ping = database_ping
        self._max_upload_bytes = max_upload_bytes
        self._upload_chunk_bytes = upload_chunk_bytes

    def upload(
        self,
        stream: BinaryIO,
        file_name: str | None,
        content_type: str | None = None,
        transaction_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> UploadReceipt:
        """Store an upload and enqueue its ingestion.

        Raises:
            ValidationError: if no usable file name was given, or the
                transaction id or metadata contain NUL characters.
            PayloadTooLargeError: if the stream exceeds the size limit.
                Nothing is written in that case.
        """
        name = safe_file_name(file_name)
        if not name:
            raise ValidationError("No file provided")
        if contains_nul(transaction_id):
            raise ValidationError("Transaction id must not contain NUL characters")
        if contains_nul(metadata):
            raise ValidationError("Metadata must not contain NUL characters")

        data = self._read_bounded(stream)
        document_id = str(uuid.uuid4())
        workflow_id = str(uuid.uuid4())
        storage_path = document_blob_path(document_id, name)

        self._blob_store.put(storage_path, data)
        document = Document(
            id=document_id,
            original_name=name,
            storage_path=storage_path,
            content_type=content_type or "application/octet-stream",
            size_bytes=len(data),
            transaction_id=transaction_id or None,
            metadata=metadata or {},
        )
        try:
            self._doc_repo.create_with_job(document, workflow_id)
        except Exception:
            self._blob_store.delete(storage_path)
            raise

        Log.info(
            f"Accepted upload {name} ({len(data)} bytes) as document {document_id}",
            workflow_id=workflow_id,
        )
        return UploadReceipt(document_id=document_id, workflow_id=workflow_id)

    def _read_bounded(self, stream: BinaryIO) -> bytes:
        chunks: list[bytes] = []
        total = 0
        while True:
            chunk = stream.read(self._upload_chunk_bytes)
            if not chunk:
                break
            total += len(chunk)
            if total > self._max_upload_bytes:
                raise PayloadTooLargeError(
                    f"File too large: maximum is {self._max_upload_bytes} bytes"
                )
            chunks.append(chunk)
        return b"".join(chunks)

    def status(self, document_id: str) -> Document:
        try:
            return self._doc_repo.find_by_id(document_id)
        except DocumentNotFoundError as exc:
            raise NotFoundError("Document not found") from exc

    def download(self, document_id: str) -> tuple[Document, Iterator[bytes]]:
        """Return the document record and a chunked iterator over its blob."""
        document = self.status(document_id)
        try:
            body = self._blob_store.stream(document.storage_path, self._upload_chunk_bytes)
        except BlobNotFoundError as exc:
            raise NotFoundError("File not found") from exc
        return document, body

    def search(self, query: str | None, transaction_id: str | None = None) -> QueryAnswer:
        if not query or not query.strip():
            raise ValidationError("Query is required")
        return self._query_agent.query(query, transaction_id or None)

    def audit(self, document_id: str) -> tuple[AuditRecord, bool]:
        """Return the latest audit record of a document and whether it verifies."""
        self.status(document_id)
        record = self._audit_recorder.latest(document_id)
        if record is None:
            raise NotFoundError("Audit record not found")
        return record, self._audit_recorder.verify(record)

    def health(self) -> HealthReport:
        try:
            connected = self._database_ping() and self._blob_store.is_available()
        except Exception as exc:
            Log.warning(f"Health check failed: {exc}")
            connected = False
        return HealthReport(
            status="healthy" if connected else "unhealthy",
            storage_connected=connected,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
