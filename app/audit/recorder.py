from typing import Any

from app.audit.hashing import build_payload, compute_content_hash
from app.database.models import AuditRecord
from app.database.repositories.audit_repository import AuditRepository
from app.logging.logger import Log


class AuditRecorder:
    """Writes and verifies immutable audit records."""

    def __init__(self, audit_repo: AuditRepository) -> None:
        self._audit_repo = audit_repo

    def record(
        self,
        document_id: str,
        text: str,
        metadata: dict[str, Any],
        timestamp: str,
    ) -> AuditRecord:
        """Hash the document content and append it to the audit trail.

        Identical inputs yield an identical hash, so a retried write lands on
        the record that is already stored.
        """
        payload = build_payload(document_id, text, metadata, timestamp)
        record = AuditRecord(
            document_id=document_id,
            content_hash=compute_content_hash(payload),
            payload=payload,
        )
        stored = self._audit_repo.append(record)
        Log.info(f"Audit record {stored.content_hash} written for document {document_id}")
        return stored

    def latest(self, document_id: str) -> AuditRecord | None:
        return self._audit_repo.find_latest(document_id)

    @staticmethod
    def verify(record: AuditRecord) -> bool:
        """True when the stored payload still hashes to the stored digest."""
        return compute_content_hash(record.payload) == record.content_hash
