"""
Module for collecting upload outcomes and persisting the result report.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .exceptions import ReportWriteError
from .models import UploadOutcome

logger = logging.getLogger(__name__)


class ResultReporter:
    """Accumulates per-file outcomes and writes them as JSON."""

    def __init__(self):
        self._success: List[Dict[str, Any]] = []
        self._fail: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def record(self, outcome: UploadOutcome) -> None:
        """Record the outcome of one file."""
        with self._lock:
            if outcome.success:
                self._success.append({
                    'file': outcome.local_path,
                    'key': outcome.key,
                    'skipped': outcome.skipped
                })
            else:
                self._fail.append({
                    'file': outcome.local_path,
                    'key': outcome.key,
                    'msg': outcome.message
                })

    def record_all(self, outcomes: Iterable[UploadOutcome]) -> None:
        for outcome in outcomes:
            self.record(outcome)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        with self._lock:
            return {
                'success': list(self._success),
                'fail': list(self._fail)
            }

    def save(self, cwd: str, output: str) -> Path:
        """Write the report relative to the working directory.

        Args:
            cwd: Working directory
            output: Report file name or relative path

        Returns:
            Path the report was written to

        Raises:
            ReportWriteError: If the file cannot be written
        """
        path = Path(cwd) / output
        try:
            with open(path, 'w') as f:
                json.dump(self.to_dict(), f, indent='\t')
        except OSError as e:
            raise ReportWriteError(str(path), str(e)) from e

        logger.debug(f"Saved upload results to {path}")
        return path
