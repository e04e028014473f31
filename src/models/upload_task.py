"""
Upload Task domain model.
In-flight state of uploading one file, owned by the upload scheduler.
"""
import time
from dataclasses import dataclass
from typing import List, Optional

PENDING = "pending"
UPLOADING = "uploading"
COMPLETE = "complete"
CANCELLED = "cancelled"
FAILED = "failed"

TERMINAL_STATUSES = {COMPLETE, CANCELLED, FAILED}

_ALLOWED_TRANSITIONS = {
    PENDING: {UPLOADING, CANCELLED, FAILED},
    UPLOADING: {COMPLETE, CANCELLED, FAILED},
}


@dataclass(frozen=True)
class FileIdentity:
    """Name, declared size and declared MIME type of a file."""
    name: str
    size: int
    content_type: str


@dataclass(frozen=True)
class ProgressSnapshot:
    """Read-only progress view handed to observers."""
    upload_id: str
    file_name: str
    percent: float
    throughput_bytes_per_sec: float
    completed_chunks: int
    total_chunks: int


class UploadTask:
    """Domain model for one file's upload."""

    def __init__(
        self,
        upload_id: str,
        file_identity: FileIdentity,
        batch_id: Optional[str] = None,
        total_chunks: int = 0
    ):
        self.upload_id = upload_id
        self.batch_id = batch_id
        self.file_identity = file_identity
        self.total_chunks = total_chunks
        self.completed_chunks = 0
        self.bytes_transferred = 0
        self.status = PENDING
        self.started_at: Optional[float] = None
        self.object_key: Optional[str] = None
        self.file_id: Optional[str] = None
        self.error_message: Optional[str] = None
        self.error_stage: Optional[str] = None
        self.failed_chunk_indices: List[int] = []

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def start(self, total_chunks: int, object_key: str) -> None:
        """Move to uploading once the chunk plan is known."""
        self.total_chunks = total_chunks
        self.object_key = object_key
        self.started_at = time.monotonic()
        self.transition(UPLOADING)

    def transition(self, status: str) -> None:
        """
        Change status along pending -> uploading -> {complete|cancelled|failed}.

        Raises:
            ValueError: If the transition is not allowed
        """
        if status not in _ALLOWED_TRANSITIONS.get(self.status, set()):
            raise ValueError(f"Invalid upload status transition {self.status} -> {status}")
        self.status = status

    def fail(self, message: str, failed_chunk_indices: Optional[List[int]] = None, stage: str = "upload") -> None:
        self.error_message = message
        self.error_stage = stage
        if failed_chunk_indices:
            self.failed_chunk_indices = sorted(failed_chunk_indices)
        self.transition(FAILED)

    def cancel(self, message: str = "Upload cancelled") -> None:
        self.error_message = message
        self.transition(CANCELLED)

    def record_chunk(self, size_bytes: int) -> ProgressSnapshot:
        """
        Count one successfully uploaded chunk.

        Only the scheduler's completion handler calls this; counters never decrease.
        """
        if self.completed_chunks >= self.total_chunks:
            raise ValueError(f"Upload {self.upload_id} already has all {self.total_chunks} chunks")
        self.completed_chunks += 1
        self.bytes_transferred += size_bytes
        return self.snapshot()

    def elapsed_seconds(self) -> float:
        if self.started_at is None:
            return 0.0
        return time.monotonic() - self.started_at

    def snapshot(self) -> ProgressSnapshot:
        if self.total_chunks:
            percent = self.completed_chunks / self.total_chunks * 100
        else:
            percent = 0.0
        elapsed = self.elapsed_seconds()
        throughput = self.bytes_transferred / elapsed if elapsed > 0 else 0.0
        return ProgressSnapshot(
            upload_id=self.upload_id,
            file_name=self.file_identity.name,
            percent=percent,
            throughput_bytes_per_sec=throughput,
            completed_chunks=self.completed_chunks,
            total_chunks=self.total_chunks
        )

    def __repr__(self):
        return (
            f"UploadTask(upload_id={self.upload_id}, file={self.file_identity.name}, "
            f"status={self.status}, chunks={self.completed_chunks}/{self.total_chunks})"
        )
