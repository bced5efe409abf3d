"""
Module for enumerating local files and mapping them to remote keys.
"""
import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, List

from .exceptions import EnumerationError, KeyMappingError

logger = logging.getLogger(__name__)


def _to_posix(path: str) -> str:
    return path.replace("\\", "/")


def resolve_base(cwd: str, base: str) -> str:
    """Resolve the base directory to an absolute forward-slash path.

    The result always ends with exactly one ``/``.
    """
    resolved = os.path.normpath(os.path.join(cwd, base))
    return _to_posix(resolved).rstrip("/") + "/"


def map_key(base: str, path: str) -> str:
    """Strip the base directory from a file path to produce its remote key.

    Args:
        base: Base directory, with or without a trailing separator
        path: Absolute path of a file under ``base``

    Returns:
        Relative, forward-slash key

    Raises:
        KeyMappingError: If ``path`` is not under ``base``
    """
    prefix = _to_posix(base).rstrip("/") + "/"
    normalized = _to_posix(path)

    if not normalized.startswith(prefix) or normalized == prefix:
        raise KeyMappingError(path, prefix)

    return normalized[len(prefix):]


class FileScanner:
    """Expands a glob pattern, minus exclusions, into a list of files."""

    def __init__(self, pattern: str, ignore: Iterable[str] = (),
                 include_hidden: bool = False):
        """Initialize the file scanner.

        Args:
            pattern: Glob pattern relative to the working directory. ``**``
                matches any number of directories.
            ignore: Patterns matched against the path relative to the working
                directory; matching files are skipped
            include_hidden: Whether wildcards match names starting with ``.``.
                Dot names written literally in the pattern always match.
        """
        self.pattern = pattern
        self.ignore = list(ignore)
        self.include_hidden = include_hidden
        self._literal_parts = set(pattern.replace("\\", "/").split("/"))

    def is_hidden(self, relative_path: str) -> bool:
        """Check whether a wildcard matched a dot-prefixed path component."""
        return any(
            part.startswith(".") and part not in self._literal_parts
            for part in relative_path.split("/")
        )

    def should_exclude(self, relative_path: str) -> bool:
        """Check whether a relative path is hidden or matches an exclusion pattern."""
        if not self.include_hidden and self.is_hidden(relative_path):
            return True
        return any(fnmatch.fnmatchcase(relative_path, p) for p in self.ignore)

    def scan(self, cwd: str) -> List[str]:
        """Scan the working directory for matching files.

        Args:
            cwd: Directory the pattern is resolved against

        Returns:
            Sorted list of absolute, forward-slash file paths

        Raises:
            EnumerationError: If the glob engine fails
        """
        root = Path(cwd)
        if not root.is_dir():
            raise EnumerationError(self.pattern, f"working directory does not exist: {cwd}")

        try:
            matches = root.glob(self.pattern)
            files = []
            for path in matches:
                if not path.is_file():
                    continue
                relative = path.relative_to(root).as_posix()
                if self.should_exclude(relative):
                    logger.debug(f"Excluded {relative}")
                    continue
                files.append(_to_posix(str(path)))
        except (OSError, ValueError, NotImplementedError) as e:
            logger.error(f"Unexpected error when getting upload files: {e}")
            raise EnumerationError(self.pattern, str(e)) from e

        files.sort()
        logger.info(f"Found {len(files)} files to upload")
        return files
