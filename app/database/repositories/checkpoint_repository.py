from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection


class CheckpointRepository:
    """Per-step result table keyed by (document_id, step_name).

    A step with a stored result is never executed again for the same document.
    """

    def load(self, document_id: str) -> dict[str, dict[str, Any]]:
        """Return completed step results for a document, keyed by step name."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT step_name, result
                    FROM workflow_checkpoints
                    WHERE document_id = %s
                    """,
                    (document_id,),
                )
                rows = cur.fetchall()
        return {row["step_name"]: row["result"] for row in rows}

    def save(self, document_id: str, step_name: str, result: dict[str, Any]) -> None:
        """Durably record a completed step. The first recorded result wins."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO workflow_checkpoints (document_id, step_name, result)
                VALUES (%s, %s, %s)
                ON CONFLICT (document_id, step_name) DO NOTHING
                """,
                (document_id, step_name, Jsonb(result)),
            )
            conn.commit()
