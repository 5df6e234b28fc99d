from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from app.audit.recorder import AuditRecorder
from app.config.settings import Settings
from app.database.models import STATUS_FAILED, STATUS_PROCESSED
from app.database.repositories.audit_repository import AuditRepository
from app.database.repositories.checkpoint_repository import CheckpointRepository
from app.database.repositories.documents_repository import DocumentsRepository
from app.database.repositories.search_index_repository import SearchIndexRepository
from app.embedding.embedder import Embedder
from app.extraction.extractor import DocumentExtractor
from app.extraction.fallback import FallbackExtractor
from app.extraction.vision import VisionOcr
from app.indexing.search_indexer import SearchIndexer
from app.llm.client_base import BaseLlmClient
from app.llm.factory import LlmClientFactory
from app.logging.logger import Log
from app.pdf.factory import PdfExtractorFactory
from app.storage.base import BaseBlobStore
from app.storage.local_blob_store import LocalBlobStore
from app.vector_index.base import BaseVectorIndex
from app.vector_index.factory import VectorIndexFactory
from app.workflow.exceptions import (
    EmbeddingUnavailable,
    ExtractionDegraded,
    StepFailedError,
)
from app.workflow.pipeline import WorkflowContext, WorkflowStep
from app.workflow.retry import RetryPolicy
from app.workflow.steps import (
    AUDIT,
    EMBED,
    EXTRACT,
    INDEX,
    AuditStep,
    EmbedStep,
    ExtractStep,
    IndexStep,
)


@dataclass(frozen=True)
class WorkflowOutcome:
    """Terminal state a workflow run left the document in."""

    document_id: str
    status: str
    processing_results: dict[str, Any] = field(default_factory=dict)


class IngestionWorkflow:
    """Drives one document from uploaded to processed or failed.

    Order: extract -> (embed || audit) -> index -> finalize. Each completed
    step is checkpointed; a resumed run restores checkpointed results and only
    executes the steps after them.
    """

    def __init__(
        self,
        *,
        doc_repo: DocumentsRepository,
        checkpoint_repo: CheckpointRepository,
        extract_step: ExtractStep,
        embed_step: EmbedStep,
        audit_step: AuditStep,
        index_step: IndexStep,
        retry_policy: RetryPolicy,
    ) -> None:
        self._doc_repo = doc_repo
        self._checkpoint_repo = checkpoint_repo
        self._extract_step = extract_step
        self._embed_step = embed_step
        self._audit_step = audit_step
        self._index_step = index_step
        self._retry_policy = retry_policy

    def run(self, document_id: str) -> WorkflowOutcome:
        """Run (or resume) the workflow for a document.

        Raises only on infrastructure faults outside the step retry budget
        (e.g. the checkpoint table is unreachable); the caller may re-run.
        """
        document = self._doc_repo.find_by_id(document_id)
        if document.is_terminal:
            Log.info(f"Document {document_id} already {document.status}, nothing to do")
            return WorkflowOutcome(document_id, document.status, document.processing_results)

        self._doc_repo.mark_processing(document_id)
        context = WorkflowContext(
            document=document,
            results=self._checkpoint_repo.load(document_id),
        )
        if context.results:
            Log.info(
                f"Resuming document {document_id} after steps {sorted(context.results)}"
            )

        try:
            self._run_step(self._extract_step, context)
            self._run_concurrently(context, self._embed_step, self._audit_step)
            self._run_step(self._index_step, context)
        except StepFailedError as exc:
            return self._finalize_failed(context, exc)
        return self._finalize_processed(context)

    def _run_concurrently(self, context: WorkflowContext, *steps: WorkflowStep) -> None:
        """Run independent steps in parallel and wait for all of them.

        A fatal failure is raised only after every step has settled.
        """
        with ThreadPoolExecutor(max_workers=len(steps)) as pool:
            futures = [pool.submit(self._run_step, step, context) for step in steps]
        for future in futures:
            future.result()

    def _run_step(self, step: WorkflowStep, context: WorkflowContext) -> None:
        if step.name in context.results:
            Log.info(f"Skipping step {step.name} for document {context.document_id}: checkpointed")
            return

        Log.info(f"Running step {step.name} for document {context.document_id}")
        if step.fatal:
            try:
                result = self._retry_policy.call(
                    f"Step {step.name} for document {context.document_id}",
                    lambda: step.run(context),
                )
            except Exception as exc:
                Log.error(
                    f"Step {step.name} failed for document {context.document_id} "
                    f"after {self._retry_policy.max_attempts} attempts: {exc}"
                )
                raise step.failure_error(step.name, str(exc) or type(exc).__name__) from exc
        else:
            result = step.run(context)

        self._checkpoint_repo.save(context.document_id, step.name, result)
        context.results[step.name] = result

    def _finalize_processed(self, context: WorkflowContext) -> WorkflowOutcome:
        results = self._merge_results(context)
        self._doc_repo.mark_processed(context.document_id, results)
        Log.info(f"Document {context.document_id} processed")
        return WorkflowOutcome(context.document_id, STATUS_PROCESSED, results)

    def _finalize_failed(self, context: WorkflowContext, exc: StepFailedError) -> WorkflowOutcome:
        results = self._merge_results(context)
        results.update(
            {
                "error": type(exc).__name__,
                "failedStep": exc.step_name,
                "errorMessage": exc.message,
            }
        )
        self._doc_repo.mark_failed(context.document_id, results)
        Log.error(
            f"Document {context.document_id} failed at step {exc.step_name}: {exc.message}"
        )
        return WorkflowOutcome(context.document_id, STATUS_FAILED, results)

    @staticmethod
    def _merge_results(context: WorkflowContext) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        warnings: list[dict[str, Any]] = []

        extract = context.results.get(EXTRACT)
        if extract is not None:
            merged["ocrConfidence"] = extract["confidence"]
            merged["extractionKind"] = extract["extractionKind"]
            if extract.get("error"):
                warnings.append(ExtractionDegraded(extract["error"]).as_warning())

        embed = context.results.get(EMBED)
        if embed is not None:
            merged["vectorId"] = embed["vectorId"]
            merged["embeddingPresent"] = embed["embeddingPresent"]
            if embed.get("error"):
                warnings.append(EmbeddingUnavailable(embed["error"]).as_warning())

        audit = context.results.get(AUDIT)
        if audit is not None:
            merged["auditRecordId"] = audit["auditRecordId"]
            merged["contentHash"] = audit["contentHash"]

        index = context.results.get(INDEX)
        merged["searchIndexed"] = bool(index and index.get("indexed"))

        merged["warnings"] = warnings
        return merged


def build_workflow(
    settings: Settings,
    *,
    blob_store: BaseBlobStore | None = None,
    llm_client: BaseLlmClient | None = None,
    vector_index: BaseVectorIndex | None = None,
) -> IngestionWorkflow:
    """Build an IngestionWorkflow with all required adapters."""
    blob_store = blob_store or LocalBlobStore(Path(settings.storage_root))
    llm_client = llm_client or LlmClientFactory.create(settings)
    vector_index = vector_index or VectorIndexFactory.create(settings)
    retry_policy = RetryPolicy.from_settings(settings)

    extractor = DocumentExtractor(
        vision=VisionOcr(llm_client, settings.ocr_model_name),
        fallback=FallbackExtractor(PdfExtractorFactory.create(settings)),
    )
    embedder = Embedder(
        client=llm_client,
        vector_index=vector_index,
        model=settings.embedding_model_name,
        min_text_chars=settings.embedding_min_text_chars,
        snippet_chars=settings.vector_snippet_chars,
        retry_policy=retry_policy,
    )
    return IngestionWorkflow(
        doc_repo=DocumentsRepository(),
        checkpoint_repo=CheckpointRepository(),
        extract_step=ExtractStep(blob_store, extractor),
        embed_step=EmbedStep(embedder),
        audit_step=AuditStep(AuditRecorder(AuditRepository())),
        index_step=IndexStep(
            SearchIndexer(SearchIndexRepository(), settings.search_content_max_chars)
        ),
        retry_policy=retry_policy,
    )
