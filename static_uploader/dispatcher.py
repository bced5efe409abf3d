"""
Module for running uploads on a fixed-size worker pool.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Callable, List, Optional

from .exceptions import UploadError
from .models import RunStats, UploadFailure, UploadJob, UploadOutcome, UploadSuccess, UploadSummary
from .storage import ObjectStorage

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[UploadOutcome, RunStats], None]


class UploadDispatcher:
    """Drains a list of upload jobs with a bounded number of workers.

    Each worker pops a job from the shared list, uploads it and records the
    outcome, until the list is empty. A failed upload is recorded and never
    retried; it does not stop the other workers.
    """

    def __init__(self, storage: ObjectStorage, workers: int = 2):
        """Initialize the dispatcher.

        Args:
            storage: Storage adapter that performs the puts
            workers: Maximum number of concurrent uploads
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.storage = storage
        self.workers = workers

    def _upload(self, job: UploadJob) -> UploadOutcome:
        logger.debug(f"Uploading {job.local_path}")
        try:
            policy = self.storage.build_upload_policy(job.key)
            self.storage.put_file(policy, job.key, job.local_path)
        except UploadError as e:
            return UploadFailure(job.local_path, job.key, e.message, e.status_code)
        except Exception as e:
            return UploadFailure(job.local_path, job.key, str(e) or type(e).__name__)
        return UploadSuccess(job.local_path, job.key)

    def run(self, jobs: List[UploadJob],
            on_outcome: Optional[OutcomeCallback] = None) -> UploadSummary:
        """Upload every job and collect one outcome per job.

        Args:
            jobs: Jobs to upload. The list is copied, not consumed.
            on_outcome: Called after each file with its outcome and a copy
                of the stats taken when the outcome was recorded. Errors
                raised by the callback are logged and ignored.

        Returns:
            UploadSummary object
        """
        pending = list(jobs)
        stats = RunStats(total=len(pending))
        results: List[UploadOutcome] = []
        lock = threading.Lock()

        def worker() -> None:
            while True:
                with lock:
                    if not pending:
                        return
                    job = pending.pop()
                    stats.in_flight += 1

                outcome = self._upload(job)

                with lock:
                    stats.in_flight -= 1
                    if outcome.success:
                        stats.succeeded += 1
                    else:
                        stats.failed += 1
                    results.append(outcome)
                    snapshot = replace(stats)

                if outcome.success:
                    logger.info(f"Upload success: {job.local_path}")
                else:
                    logger.error(f"Upload error: {job.local_path}: {outcome.message}")
                logger.debug(snapshot.format())

                if on_outcome:
                    try:
                        on_outcome(outcome, snapshot)
                    except Exception:
                        logger.exception(f"Outcome callback failed for {job.local_path}")

        worker_count = min(self.workers, len(pending))
        if worker_count:
            with ThreadPoolExecutor(max_workers=worker_count,
                                    thread_name_prefix="upload") as executor:
                futures = [executor.submit(worker) for _ in range(worker_count)]
                for future in as_completed(futures):
                    future.result()

        return UploadSummary(
            total_files=stats.total,
            successful_uploads=stats.succeeded,
            failed_uploads=stats.failed,
            results=results
        )
