from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(_CamelModel):
    error: str


class UploadResponse(_CamelModel):
    document_id: str = Field(alias="documentId")
    workflow_id: str = Field(alias="workflowId")
    status: str


class StatusResponse(_CamelModel):
    document_id: str = Field(alias="documentId")
    file_name: str = Field(alias="fileName")
    transaction_id: str | None = Field(default=None, alias="transactionId")
    status: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    processing_results: dict[str, Any] = Field(
        default_factory=dict, alias="processingResults"
    )
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class SearchRequest(_CamelModel):
    query: str | None = None
    transaction_id: str | None = Field(default=None, alias="transactionId")


class SourceResponse(_CamelModel):
    document_id: str = Field(alias="documentId")
    confidence: float
    snippet: str


class SearchResponse(_CamelModel):
    answer: str
    sources: list[SourceResponse] = Field(default_factory=list)
    confidence: float = 0.0


class AuditResponse(_CamelModel):
    document_id: str = Field(alias="documentId")
    content_hash: str = Field(alias="contentHash")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    verified: bool


class HealthResponse(_CamelModel):
    status: str
    storage_connected: bool = Field(alias="storageConnected")
    timestamp: str
