from typing import Any

from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.models import SearchIndexEntry


class SearchIndexRepository:
    """Database operations for the search_index table."""

    def write_entry(self, entry: SearchIndexEntry) -> bool:
        """Write a fully populated row, then publish it.

        The row lands with searchable = false and is flipped to true in the
        same transaction only when content and vector_id are present, so
        readers filtering on searchable never see a partial row.

        Returns:
            True if the row is searchable after the write.
        """
        with get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO search_index
                        (document_id, transaction_id, content, vector_id,
                         confidence, indexed_at, searchable)
                        VALUES (%s, %s, %s, %s, %s, NOW(), FALSE)
                        ON CONFLICT (document_id) DO UPDATE
                        SET transaction_id = EXCLUDED.transaction_id,
                            content = EXCLUDED.content,
                            vector_id = EXCLUDED.vector_id,
                            confidence = EXCLUDED.confidence,
                            indexed_at = EXCLUDED.indexed_at,
                            searchable = FALSE
                        """,
                        (
                            entry.document_id,
                            entry.transaction_id,
                            entry.content,
                            entry.vector_id,
                            entry.confidence,
                        ),
                    )
                    cur.execute(
                        """
                        UPDATE search_index
                        SET searchable = TRUE
                        WHERE document_id = %s
                          AND content <> ''
                          AND vector_id <> ''
                        """,
                        (entry.document_id,),
                    )
                    published = cur.rowcount > 0
        return published

    def find_searchable(
        self,
        document_ids: list[str],
        transaction_id: str | None = None,
    ) -> list[SearchIndexEntry]:
        """Return searchable rows for the given documents, optionally scoped."""
        if not document_ids:
            return []
        query = """
            SELECT document_id, transaction_id, content, vector_id,
                   confidence, indexed_at, searchable
            FROM search_index
            WHERE searchable
              AND document_id = ANY(%s::uuid[])
        """
        params: list[Any] = [document_ids]
        if transaction_id is not None:
            query += " AND transaction_id = %s"
            params.append(transaction_id)

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [_row_to_entry(row) for row in rows]


def _row_to_entry(row: dict[str, Any]) -> SearchIndexEntry:
    return SearchIndexEntry(
        document_id=str(row["document_id"]),
        transaction_id=row["transaction_id"],
        content=row["content"],
        vector_id=row["vector_id"],
        confidence=row["confidence"],
        indexed_at=row["indexed_at"],
        searchable=row["searchable"],
    )
