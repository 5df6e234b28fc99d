from datetime import datetime, timezone
from typing import Any

from app.audit.recorder import AuditRecorder
from app.embedding.embedder import Embedder
from app.extraction.extractor import DocumentExtractor
from app.indexing.search_indexer import SearchIndexer
from app.logging.logger import Log
from app.storage.base import BaseBlobStore
from app.workflow.exceptions import AuditWriteFailed, IndexWriteFailed
from app.workflow.pipeline import WorkflowContext, WorkflowStep

EXTRACT = "extract"
EMBED = "embed"
AUDIT = "audit"
INDEX = "index"


class ExtractStep(WorkflowStep):
    name = EXTRACT

    def __init__(self, blob_store: BaseBlobStore, extractor: DocumentExtractor) -> None:
        self._blob_store = blob_store
        self._extractor = extractor

    def run(self, context: WorkflowContext) -> dict[str, Any]:
        if not context.raw_bytes:
            context.raw_bytes = self._blob_store.read(context.document.storage_path)
        Log.info(
            f"Loaded {len(context.raw_bytes)} bytes for document {context.document_id}"
        )
        result = self._extractor.extract(context.raw_bytes, context.document.original_name)
        Log.info(
            f"Extracted {len(result.text)} chars from document {context.document_id} "
            f"({result.extraction_kind}, confidence {result.confidence})"
        )
        return {
            "text": result.text,
            "confidence": result.confidence,
            "extractionKind": result.extraction_kind,
            "error": result.error,
            "extractedAt": datetime.now(timezone.utc).isoformat(),
        }


class EmbedStep(WorkflowStep):
    name = EMBED

    def __init__(self, embedder: Embedder) -> None:
        self._embedder = embedder

    def run(self, context: WorkflowContext) -> dict[str, Any]:
        extract = context.require(EXTRACT)
        outcome = self._embedder.embed_document(
            context.document_id,
            extract["text"],
            context.document.transaction_id,
        )
        return {
            "vectorId": outcome.vector_id,
            "embeddingPresent": outcome.embedding_present,
            "error": outcome.error,
        }


class AuditStep(WorkflowStep):
    name = AUDIT
    fatal = True
    failure_error = AuditWriteFailed

    def __init__(self, recorder: AuditRecorder) -> None:
        self._recorder = recorder

    def run(self, context: WorkflowContext) -> dict[str, Any]:
        extract = context.require(EXTRACT)
        record = self._recorder.record(
            context.document_id,
            extract["text"],
            context.document.metadata,
            extract["extractedAt"],
        )
        return {"auditRecordId": record.content_hash, "contentHash": record.content_hash}


class IndexStep(WorkflowStep):
    name = INDEX
    fatal = True
    failure_error = IndexWriteFailed

    def __init__(self, indexer: SearchIndexer) -> None:
        self._indexer = indexer

    def run(self, context: WorkflowContext) -> dict[str, Any]:
        extract = context.require(EXTRACT)
        embed = context.require(EMBED)
        context.require(AUDIT)
        indexed = self._indexer.index(
            document_id=context.document_id,
            transaction_id=context.document.transaction_id,
            text=extract["text"],
            vector_id=embed["vectorId"],
            confidence=extract["confidence"],
        )
        if not indexed:
            raise RuntimeError(
                f"Search index entry for document {context.document_id} was not published"
            )
        return {"indexed": True}
