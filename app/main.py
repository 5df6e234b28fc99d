from app.config.settings import Settings
from app.database.connection import apply_schema, close_pool, init_pool
from app.database.repositories.documents_repository import DocumentsRepository
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.worker.job_runner import JobRunner
from app.worker.worker import Worker
from app.workflow.workflow import build_workflow


def main() -> None:
    """Entry point: initialize pool -> apply schema -> build workflow -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        apply_schema()
        workflow = build_workflow(settings)
        job_repo = JobRepository(settings.max_job_attempts)
        job_runner = JobRunner(workflow, job_repo, DocumentsRepository(), settings)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
