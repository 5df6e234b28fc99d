import uuid
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.exceptions import DocumentNotFoundError
from app.database.models import (
    JOB_PENDING,
    STATUS_FAILED,
    STATUS_PROCESSED,
    STATUS_PROCESSING,
    STATUS_UPLOADED,
    Document,
)

_DOCUMENT_COLUMNS = """
    id, original_name, storage_path, content_type, size_bytes, transaction_id,
    metadata, status, processing_results, created_at, updated_at
"""


class DocumentsRepository:
    """Database operations for the documents table.

    Status updates are guarded in SQL so a document only ever moves forward:
    uploaded -> processing -> processed | failed.
    """

    def create_with_job(self, document: Document, job_id: str) -> None:
        """Insert the document and its ingestion job in one transaction."""
        with get_connection() as conn:
            with conn.transaction():
                conn.execute(
                    """
                    INSERT INTO documents
                    (id, original_name, storage_path, content_type, size_bytes,
                     transaction_id, metadata, status)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        document.id,
                        document.original_name,
                        document.storage_path,
                        document.content_type,
                        document.size_bytes,
                        document.transaction_id,
                        Jsonb(document.metadata),
                        STATUS_UPLOADED,
                    ),
                )
                conn.execute(
                    """
                    INSERT INTO ingestion_jobs (id, document_id, status, attempts)
                    VALUES (%s, %s, %s, 0)
                    """,
                    (job_id, document.id, JOB_PENDING),
                )

    def find_by_id(self, document_id: str) -> Document:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        try:
            uuid.UUID(document_id)
        except ValueError as exc:
            raise DocumentNotFoundError(f"Document {document_id} not found") from exc

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return _row_to_document(row)

    def mark_processing(self, document_id: str) -> bool:
        """Move an uploaded document to processing. False if it already moved on."""
        return self._transition(document_id, STATUS_PROCESSING, (STATUS_UPLOADED,), None)

    def mark_processed(self, document_id: str, processing_results: dict[str, Any]) -> bool:
        """Finalize a document as processed with its merged step results."""
        return self._transition(
            document_id,
            STATUS_PROCESSED,
            (STATUS_UPLOADED, STATUS_PROCESSING),
            processing_results,
        )

    def mark_failed(self, document_id: str, processing_results: dict[str, Any]) -> bool:
        """Finalize a document as failed, keeping partial results and the error."""
        return self._transition(
            document_id,
            STATUS_FAILED,
            (STATUS_UPLOADED, STATUS_PROCESSING),
            processing_results,
        )

    def _transition(
        self,
        document_id: str,
        status: str,
        allowed_from: tuple[str, ...],
        processing_results: dict[str, Any] | None,
    ) -> bool:
        with get_connection() as conn:
            with conn.cursor() as cur:
                if processing_results is None:
                    cur.execute(
                        """
                        UPDATE documents
                        SET status = %s, updated_at = NOW()
                        WHERE id = %s AND status = ANY(%s)
                        """,
                        (status, document_id, list(allowed_from)),
                    )
                else:
                    cur.execute(
                        """
                        UPDATE documents
                        SET status = %s,
                            processing_results = processing_results || %s,
                            updated_at = NOW()
                        WHERE id = %s AND status = ANY(%s)
                        """,
                        (status, Jsonb(processing_results), document_id, list(allowed_from)),
                    )
                updated = cur.rowcount > 0
            conn.commit()
        return updated


def _row_to_document(row: dict[str, Any]) -> Document:
    return Document(
        id=str(row["id"]),
        original_name=row["original_name"],
        storage_path=row["storage_path"],
        content_type=row["content_type"],
        size_bytes=row["size_bytes"],
        transaction_id=row["transaction_id"],
        metadata=row["metadata"] or {},
        status=row["status"],
        processing_results=row["processing_results"] or {},
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
