from dataclasses import dataclass

UPLOAD_STATUS = "processing"


@dataclass(frozen=True)
class UploadReceipt:
    """Handle returned to the caller right after an upload is accepted."""

    document_id: str
    workflow_id: str
    status: str = UPLOAD_STATUS


@dataclass(frozen=True)
class HealthReport:
    status: str
    storage_connected: bool
    timestamp: str

    @property
    def healthy(self) -> bool:
        return self.status == "healthy"
