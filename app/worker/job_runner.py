from app.config.settings import Settings
from app.database.models import JobRecord
from app.database.repositories.documents_repository import DocumentsRepository
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.workflow.workflow import IngestionWorkflow

CRASH_ERROR = "WorkflowCrashed"


class JobRunner:
    """Run one ingestion job, catch infrastructure faults, and apply retry logic.

    Step failures never reach this class: the workflow records them on the
    document. What does reach it (lost DB connection, unreadable blob) leaves
    the document mid-flight, so the job is returned to the queue and the next
    run resumes from the last checkpoint.
    """

    def __init__(
        self,
        workflow: IngestionWorkflow,
        job_repo: JobRepository,
        doc_repo: DocumentsRepository,
        settings: Settings,
    ) -> None:
        self._workflow = workflow
        self._job_repo = job_repo
        self._doc_repo = doc_repo
        self._settings = settings

    def run(self, job: JobRecord) -> None:
        """Execute a single job with error handling."""
        Log.info(
            f"Running job {job.id} (attempt {job.attempts + 1})",
            document_id=job.document_id,
        )
        try:
            outcome = self._workflow.run(job.document_id)
            self._job_repo.mark_done(job.id)
            Log.info(f"Job {job.id} completed with document status {outcome.status}")
        except Exception as exc:
            self._handle_failure(job, exc)

    def _handle_failure(self, job: JobRecord, exc: Exception) -> None:
        """Increment attempts; at max, fail the job and force-fail the document."""
        Log.exception(f"Job {job.id} crashed: {exc}", document_id=job.document_id)
        if job.attempts + 1 >= self._settings.max_job_attempts:
            self._job_repo.mark_failed(job.id, str(exc))
            self._force_fail_document(job, exc)
            Log.error(f"Job {job.id} permanently failed after {job.attempts + 1} attempts")
        else:
            self._job_repo.increment_attempts(job.id, str(exc))
            Log.warning(f"Job {job.id} will be resumed (attempt {job.attempts + 2})")

    def _force_fail_document(self, job: JobRecord, exc: Exception) -> None:
        try:
            self._doc_repo.mark_failed(
                job.document_id,
                {"error": CRASH_ERROR, "errorMessage": str(exc) or type(exc).__name__},
            )
        except Exception as mark_exc:
            Log.error(
                f"Could not mark document {job.document_id} as failed: {mark_exc}"
            )
