import time

from app.config.settings import Settings
from app.database.connection import get_connection
from app.database.models import JobRecord
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.worker.job_runner import JobRunner


class Worker:
    """Ingestion queue consumer: claim a job, hand it to the runner, repeat."""

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._poll_interval = settings.job_poll_interval_seconds

    def run(self, max_jobs: int | None = None) -> int:
        """Consume jobs until interrupted and return how many were dispatched.

        With max_jobs set the loop stops once that many jobs were dispatched.
        """
        Log.info(f"Ingestion worker started, poll interval {self._poll_interval}s")
        dispatched = 0
        try:
            while max_jobs is None or dispatched < max_jobs:
                job = self._claim()
                if job is None:
                    Log.debug("Ingestion queue empty")
                    time.sleep(self._poll_interval)
                    continue
                self._job_runner.run(job)
                dispatched += 1
        except KeyboardInterrupt:
            Log.info(f"Ingestion worker stopped after {dispatched} jobs")
        return dispatched

    def _claim(self) -> JobRecord | None:
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Could not claim ingestion job, retrying next tick: {exc}")
            return None
