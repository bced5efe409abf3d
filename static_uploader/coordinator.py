"""
Module for coordinating an upload run and remote cleanup.
"""
import logging
from typing import Any, List, Optional

from .config import UploaderConfig, load_config
from .dispatcher import UploadDispatcher
from .exceptions import ReportWriteError
from .models import DeleteSummary, RunStats, UploadJob, UploadOutcome, UploadSummary
from .remote import RemoteObjectManager
from .reporter import ResultReporter
from .scanner import FileScanner, map_key, resolve_base
from .storage import ObjectStorage

logger = logging.getLogger(__name__)


class UploadCoordinator:
    """Uploads a build directory to a bucket and manages remote keys."""

    def __init__(self, config: Optional[UploaderConfig] = None,
                 storage: Optional[ObjectStorage] = None, **overrides: Any):
        """Initialize the upload coordinator.

        Args:
            config: Assembled configuration. If None, it is loaded with
                ``overrides`` applied on top of defaults and the env file.
            storage: Storage adapter. If None, one is built from config.
            **overrides: Config overrides, used only when ``config`` is None
        """
        self.config = config or load_config(overrides)
        self.storage = storage or ObjectStorage(self.config)
        self.scanner = FileScanner(self.config.glob, self.config.glob_ignore,
                                   self.config.include_hidden)
        self.dispatcher = UploadDispatcher(self.storage, self.config.workers)
        self.remote = RemoteObjectManager(self.storage)
        self.fetched_keys: List[str] = []
        self.listing_complete = True
        self._log_config()

    def _log_config(self) -> None:
        logger.info("config:")
        for name, value in self.config.describe().items():
            logger.info(f"      {name}: {value}")

    def resolve_base(self) -> str:
        return resolve_base(self.config.cwd, self.config.base)

    def build_jobs(self, files: List[str]) -> List[UploadJob]:
        """Map every file to its remote key.

        Raises:
            KeyMappingError: If any file is outside the base directory
        """
        base = self.resolve_base()
        return [UploadJob(local_path=f, key=map_key(base, f)) for f in files]

    def start(self) -> UploadSummary:
        """Enumerate, upload and report.

        Enumeration and key mapping errors abort the run before any upload.
        Per-file failures are recorded in the summary and the report.

        Returns:
            UploadSummary object
        """
        files = self.scanner.scan(self.config.cwd)
        jobs = self.build_jobs(files)
        reporter = ResultReporter()

        def on_outcome(outcome: UploadOutcome, stats: RunStats) -> None:
            reporter.record(outcome)

        logger.info("start============>")
        summary = self.dispatcher.run(jobs, on_outcome=on_outcome)

        if self.config.output:
            try:
                reporter.save(self.config.cwd, self.config.output)
            except ReportWriteError as e:
                logger.error(f"Error occurred when saving upload results: {e}")

        logger.info(
            f"Completed upload: {summary.successful_uploads}/{summary.total_files} "
            f"files uploaded successfully"
        )
        logger.info("end<==============")
        return summary

    def fetch_uploaded_files(self, prefix: str = "") -> "UploadCoordinator":
        """Fetch every remote key under ``prefix`` for a later batch delete."""
        listing = self.remote.fetch_keys(prefix)
        self.fetched_keys = listing.keys
        self.listing_complete = listing.complete
        return self

    def batch_delete_files(self, keys: Optional[List[str]] = None) -> DeleteSummary:
        """Delete ``keys``, or the keys from the last fetch when omitted."""
        targets = list(self.fetched_keys if keys is None else keys)
        summary = self.remote.delete_keys(targets)
        if keys is None:
            self.fetched_keys = []
        logger.info(f"Deleted {summary.deleted}/{summary.requested} keys")
        return summary
