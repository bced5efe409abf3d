"""
Module containing data models for the uploader.
"""
import time
from dataclasses import dataclass, field
from typing import List, Optional, Union

MAX_DELETE_BATCH = 100


@dataclass(frozen=True)
class UploadJob:
    """A local file paired with the remote key it is uploaded to."""
    local_path: str
    key: str


@dataclass(frozen=True)
class UploadSuccess:
    """A file that was uploaded."""
    local_path: str
    key: str
    skipped: bool = False

    success = True


@dataclass(frozen=True)
class UploadFailure:
    """A file that could not be uploaded."""
    local_path: str
    key: str
    message: str
    status_code: Optional[int] = None

    success = False


UploadOutcome = Union[UploadSuccess, UploadFailure]


@dataclass
class RunStats:
    """Live counters of an upload run.

    Only the dispatcher mutates these, and only while holding its lock.
    """
    total: int
    in_flight: int = 0
    succeeded: int = 0
    failed: int = 0

    @property
    def done(self) -> int:
        return self.succeeded + self.failed

    def format(self) -> str:
        return (
            f"total files: {self.total}, uploading: {self.in_flight}, "
            f"success: {self.succeeded}, fail: {self.failed}"
        )


@dataclass
class UploadSummary:
    """Represents a summary of an upload run."""
    total_files: int
    successful_uploads: int
    failed_uploads: int
    results: List[UploadOutcome]

    @property
    def successes(self) -> List[UploadSuccess]:
        return [r for r in self.results if r.success]

    @property
    def failures(self) -> List[UploadFailure]:
        return [r for r in self.results if not r.success]


@dataclass(frozen=True)
class UploadPolicy:
    """Authorization for putting one object.

    ``scope`` is ``"<bucket>:<key>"``. An insert-only policy refuses to
    replace an object that already exists.
    """
    scope: str
    expires: int
    insert_only: bool
    deadline: float

    @classmethod
    def issue(cls, bucket: str, key: str, expires: int,
              insert_only: bool) -> "UploadPolicy":
        return cls(
            scope=f"{bucket}:{key}",
            expires=expires,
            insert_only=insert_only,
            deadline=time.time() + expires,
        )

    @property
    def expired(self) -> bool:
        return time.time() >= self.deadline


@dataclass(frozen=True)
class DeleteBatch:
    """Keys submitted together in one bulk delete call."""
    keys: List[str]

    def __post_init__(self):
        if not self.keys:
            raise ValueError("A delete batch cannot be empty")
        if len(self.keys) > MAX_DELETE_BATCH:
            raise ValueError(
                f"A delete batch holds at most {MAX_DELETE_BATCH} keys, got {len(self.keys)}"
            )


@dataclass
class DeleteSummary:
    """Represents the result of a bulk delete."""
    requested: int
    deleted: int
    failed_keys: List[str] = field(default_factory=list)


@dataclass
class KeyListing:
    """Keys collected under a prefix.

    ``complete`` is False when a page could not be fetched and the keys
    are only those gathered before it.
    """
    prefix: str
    keys: List[str] = field(default_factory=list)
    complete: bool = True
