"""
Error types raised by the uploader.
"""
from typing import List, Optional


class UploaderError(Exception):
    """Base class for all uploader errors."""


class ConfigError(UploaderError):
    """Raised when the configuration cannot be assembled."""


class EnumerationError(UploaderError):
    """Raised when the glob engine fails to enumerate files."""

    def __init__(self, pattern: str, message: str):
        super().__init__(f"Cannot enumerate files for '{pattern}': {message}")
        self.pattern = pattern
        self.message = message


class KeyMappingError(UploaderError):
    """Raised when a local file does not live under the base directory."""

    def __init__(self, path: str, base: str):
        super().__init__(f"File {path} is not inside base directory {base}")
        self.path = path
        self.base = base


class UploadError(UploaderError):
    """A single file failed to upload."""

    def __init__(self, local_path: str, key: str, message: str,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.local_path = local_path
        self.key = key
        self.message = message
        self.status_code = status_code


class ReportWriteError(UploaderError):
    """Raised when the result report cannot be written."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Cannot write report {path}: {message}")
        self.path = path
        self.message = message


class ListingError(UploaderError):
    """Raised when a page of a prefix listing cannot be fetched."""

    def __init__(self, prefix: str, message: str):
        super().__init__(f"Cannot list objects under '{prefix}': {message}")
        self.prefix = prefix
        self.message = message


class BatchDeleteError(UploaderError):
    """Raised when a whole delete batch is rejected."""

    def __init__(self, keys: List[str], message: str):
        super().__init__(f"Cannot delete batch of {len(keys)} keys: {message}")
        self.keys = keys
        self.message = message
