from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.models import AuditRecord


class AuditRepository:
    """Append-only access to the audit_records table.

    No update or delete operation exists.
    """

    def append(self, record: AuditRecord) -> AuditRecord:
        """Insert an audit record; an identical retry returns the stored row."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO audit_records (document_id, content_hash, payload)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (document_id, content_hash) DO NOTHING
                    """,
                    (record.document_id, record.content_hash, Jsonb(record.payload)),
                )
                cur.execute(
                    """
                    SELECT document_id, content_hash, payload, created_at
                    FROM audit_records
                    WHERE document_id = %s AND content_hash = %s
                    """,
                    (record.document_id, record.content_hash),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(
                f"Audit record {record.content_hash} for document "
                f"{record.document_id} was not persisted"
            )
        return _row_to_record(row)

    def find_latest(self, document_id: str) -> AuditRecord | None:
        """Return the most recent audit record for a document, if any."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT document_id, content_hash, payload, created_at
                    FROM audit_records
                    WHERE document_id = %s
                    ORDER BY created_at DESC
                    LIMIT 1
                    """,
                    (document_id,),
                )
                row = cur.fetchone()
        return _row_to_record(row) if row is not None else None


def _row_to_record(row: dict[str, Any]) -> AuditRecord:
    return AuditRecord(
        document_id=str(row["document_id"]),
        content_hash=row["content_hash"],
        payload=row["payload"],
        created_at=row["created_at"],
    )
