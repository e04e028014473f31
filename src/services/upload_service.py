"""
Upload Service.
Caller-facing orchestration of the chunked upload pipeline: pre-flight
checks, then plan, schedule and finalize each file of a batch in turn.
"""
import asyncio
import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional
from src.core import config
from src.core.exceptions import (
    CommitException,
    DynamoDBException,
    MediaVaultException,
    NotAuthenticatedException,
    QuotaExceededException,
    UploadNotFoundException,
    ValidationException
)
from src.models.concurrency_policy import ConcurrencyPolicy
from src.models.file_source import FileSource
from src.models.upload_status import UploadStatus
from src.models.upload_task import UploadTask, ProgressSnapshot, COMPLETE, CANCELLED, FAILED, PENDING, UPLOADING
from src.models.user_profile import PLAN_FREE
from src.repositories.db_repository import DBRepository
from src.repositories.dynamo_repository import DynamoRepository
from src.repositories.s3_repository import S3Repository
from src.repositories.upload_status_repository import UploadStatusRepository
from src.repositories.user_profile_repository import UserProfileRepository
from src.services import chunk_planner
from src.services.chunk_transport import ChunkTransport
from src.services.file_service import FileService
from src.services.finalizer import Finalizer
from src.services.retry_governor import RetryGovernor
from src.services.upload_scheduler import UploadScheduler

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[ProgressSnapshot], None]

STAGE_FINALIZE = "finalize"
MAX_FINISHED_BATCHES = 100


@dataclass
class FileUploadResult:
    """Terminal status of one file of a batch."""
    upload_id: str
    file_name: str
    status: str
    file_id: Optional[str] = None
    error_message: Optional[str] = None
    error_stage: Optional[str] = None
    failed_chunk_indices: List[int] = field(default_factory=list)

    @classmethod
    def from_task(cls, task: UploadTask) -> "FileUploadResult":
        return cls(
            upload_id=task.upload_id,
            file_name=task.file_identity.name,
            status=task.status,
            file_id=task.file_id,
            error_message=task.error_message,
            error_stage=task.error_stage,
            failed_chunk_indices=list(task.failed_chunk_indices)
        )


class UploadBatch:
    """Files submitted together by one user, with their own cancellation event."""

    def __init__(self, batch_id: str, user_id: str, tasks: List[UploadTask], sources: List[FileSource]):
        self.batch_id = batch_id
        self.user_id = user_id
        self.tasks = tasks
        self.sources = sources
        self.cancellation = asyncio.Event()
        self.created_at = datetime.utcnow()

    @property
    def is_finished(self) -> bool:
        return all(task.is_terminal for task in self.tasks)

    @property
    def status(self) -> str:
        statuses = {task.status for task in self.tasks}
        if statuses == {PENDING}:
            return PENDING
        if not self.is_finished:
            return UPLOADING
        if FAILED in statuses:
            return FAILED
        if CANCELLED in statuses:
            return CANCELLED
        return COMPLETE

    def __repr__(self):
        return f"UploadBatch(batch_id={self.batch_id}, files={len(self.tasks)}, status={self.status})"


class UploadService:
    """Service for chunked file uploads."""

    def __init__(
        self,
        s3_repository: S3Repository = None,
        db_repository: DBRepository = None,
        user_profile_repository: UserProfileRepository = None,
        upload_status_repository: UploadStatusRepository = None,
        file_service: FileService = None,
        chunk_transport: ChunkTransport = None,
        sleep: Callable = asyncio.sleep
    ):
        settings = config.settings
        self.s3_repository = s3_repository or S3Repository()
        self.db_repository = db_repository or DynamoRepository()
        self.user_profile_repository = user_profile_repository or UserProfileRepository()
        self.upload_status_repository = upload_status_repository or UploadStatusRepository()
        self.file_service = file_service or FileService()

        self.chunk_size = settings.chunk_size_bytes
        self.policy = ConcurrencyPolicy.parse(settings.concurrency_policy, settings.max_concurrent_uploads)
        self.stop_batch_on_failure = settings.stop_batch_on_failure

        transport = chunk_transport or ChunkTransport(self.s3_repository)
        governor = RetryGovernor(
            transport,
            max_attempts=settings.max_retry_attempts,
            base_delay=settings.base_backoff_ms / 1000,
            per_attempt_timeout=settings.per_attempt_timeout_ms / 1000,
            jitter=settings.backoff_jitter,
            sleep=sleep
        )
        self.scheduler = UploadScheduler(governor)
        self.finalizer = Finalizer(self.s3_repository, self.db_repository)

        self._batches: "OrderedDict[str, UploadBatch]" = OrderedDict()
        self._last_timestamp_ms = 0

    def prepare_batch(self, files: List[FileSource], user_id: Optional[str]) -> UploadBatch:
        """
        Validate a batch and register its upload tasks.

        Checks run before any chunk is planned: authentication, size and
        type of every file, then the quota against one profile snapshot.

        Args:
            files: Files to upload, in upload order
            user_id: Authenticated user id

        Returns:
            UploadBatch with one pending task per file

        Raises:
            NotAuthenticatedException: If there is no user
            FileTooLargeException: If a file exceeds the size limit
            UnsupportedFileTypeException: If a file type is not accepted
            QuotaExceededException: If the batch does not fit the user's quota
            DynamoDBException: If the profile or status records cannot be accessed
        """
        if not user_id:
            raise NotAuthenticatedException("Please sign in to upload files")
        if not files:
            raise ValidationException("An upload batch needs at least one file")

        identities = [source.identity() for source in files]
        for identity in identities:
            self.file_service.validate_file(identity)

        profile = self.user_profile_repository.get_or_create(user_id)
        requested = sum(identity.size for identity in identities)
        if profile.storage_used + requested > profile.storage_limit:
            if profile.plan_type == PLAN_FREE:
                message = "Storage limit exceeded. Upgrade to Premium for 10GB storage!"
            else:
                message = "Storage limit exceeded. You've reached your storage limit."
            raise QuotaExceededException(message, profile.storage_used, profile.storage_limit, requested)

        batch_id = str(uuid.uuid4())
        tasks = [UploadTask(str(uuid.uuid4()), identity, batch_id=batch_id) for identity in identities]
        batch = UploadBatch(batch_id, user_id, tasks, list(files))

        for task in tasks:
            self.upload_status_repository.create(UploadStatus(
                upload_id=task.upload_id,
                status=task.status,
                filename=task.file_identity.name,
                user_id=user_id,
                created_at=batch.created_at,
                batch_id=batch_id
            ))

        self._register(batch)
        logger.info("Prepared upload batch %s with %d file(s), %d bytes", batch_id, len(tasks), requested)
        return batch

    async def run_batch(self, batch: UploadBatch, progress_observer: Optional[ProgressObserver] = None) -> List[FileUploadResult]:
        """
        Upload the files of a batch one after another.

        Returns:
            One FileUploadResult per file, in batch order
        """
        failed_file = None
        for task, source in zip(batch.tasks, batch.sources):
            if failed_file and self.stop_batch_on_failure:
                task.cancel(f"Skipped after upload of '{failed_file}' failed")
            else:
                await self._upload_file(batch, task, source, progress_observer)

            self._record_terminal_status(task)
            if task.status == FAILED:
                failed_file = failed_file or task.file_identity.name

        results = [FileUploadResult.from_task(task) for task in batch.tasks]
        logger.info(
            "Upload batch %s finished: %s",
            batch.batch_id, ", ".join(f"{r.file_name}={r.status}" for r in results)
        )
        return results

    async def start_upload(
        self,
        files: List[FileSource],
        user_id: Optional[str],
        progress_observer: Optional[ProgressObserver] = None
    ) -> List[FileUploadResult]:
        """Validate and upload a batch of files, returning each file's terminal status."""
        batch = self.prepare_batch(files, user_id)
        return await self.run_batch(batch, progress_observer)

    def cancel_upload(self, batch_id: str, user_id: Optional[str] = None) -> UploadBatch:
        """
        Request cancellation of a batch. Idempotent.

        Raises:
            UploadNotFoundException: If the batch is not known
        """
        batch = self.get_batch(batch_id, user_id)
        if not batch.cancellation.is_set():
            logger.info("Cancellation requested for upload batch %s", batch_id)
            batch.cancellation.set()
        return batch

    def get_batch(self, batch_id: str, user_id: Optional[str] = None) -> UploadBatch:
        """
        Get a batch of this process, optionally only if owned by user_id.

        Raises:
            UploadNotFoundException: If the batch is not known
        """
        batch = self._batches.get(batch_id)
        if batch is None or (user_id and batch.user_id != user_id):
            raise UploadNotFoundException(f"Upload batch '{batch_id}' not found")
        return batch

    def get_upload_status(self, upload_id: str, user_id: Optional[str] = None) -> UploadStatus:
        """
        Get the persisted status of one file upload.

        Raises:
            UploadNotFoundException: If upload_id is not known
        """
        upload_status = self.upload_status_repository.get_by_id(upload_id)
        if not upload_status or (user_id and upload_status.user_id != user_id):
            raise UploadNotFoundException(f"Upload ID '{upload_id}' not found")
        return upload_status

    async def _upload_file(self, batch: UploadBatch, task: UploadTask, source: FileSource,
                           progress_observer: Optional[ProgressObserver]) -> None:
        identity = task.file_identity
        base_key = chunk_planner.build_base_key(batch.user_id, identity.name, self._next_timestamp_ms())
        chunks = chunk_planner.plan(identity.size, self.chunk_size, base_key)
        logger.info(
            "Starting upload of %s (%.1f MB) as %s in %d chunk(s)",
            identity.name, identity.size / 1024 / 1024, base_key, len(chunks)
        )

        try:
            result = await self.scheduler.run(
                task,
                chunks,
                lambda chunk: source.read_range(chunk.start, chunk.end),
                identity.content_type,
                self.policy,
                batch.cancellation,
                progress_observer
            )
        except MediaVaultException as e:
            logger.error("Upload of %s failed: %s", identity.name, e.message)
            if not task.is_terminal:
                task.fail(e.message)
            return
        except Exception as e:
            logger.exception("Unexpected error uploading %s", identity.name)
            if not task.is_terminal:
                task.fail(str(e) or type(e).__name__)
            return

        if result.status != COMPLETE:
            return

        try:
            record = await self.finalizer.commit(task, chunks, batch.user_id)
        except CommitException as e:
            logger.error("Upload of %s failed during %s: %s", identity.name, e.stage, e.message)
            task.fail(e.message, stage=STAGE_FINALIZE)
            return

        task.file_id = record.file_id
        task.transition(COMPLETE)
        elapsed = task.elapsed_seconds()
        speed = identity.size / elapsed / 1024 / 1024 if elapsed > 0 else 0.0
        logger.info("Upload of %s complete in %.2fs, average %.1f MB/s", identity.name, elapsed, speed)

    def _record_terminal_status(self, task: UploadTask) -> None:
        updates = {
            'status': task.status,
            'total_chunks': task.total_chunks,
            'completed_chunks': task.completed_chunks,
            'bytes_transferred': task.bytes_transferred,
            'failed_chunks': task.failed_chunk_indices,
            'object_key': task.object_key,
            'file_id': task.file_id,
            'error_message': task.error_message
        }

        try:
            self.upload_status_repository.update(task.upload_id, updates)
        except (DynamoDBException, UploadNotFoundException) as e:
            # The upload outcome stands; only its persisted report is stale
            logger.error("Failed to record status %s for upload %s: %s", task.status, task.upload_id, e.message)

    def _next_timestamp_ms(self) -> int:
        """Millisecond timestamp for object keys, strictly increasing within this service."""
        now = int(time.time() * 1000)
        self._last_timestamp_ms = max(now, self._last_timestamp_ms + 1)
        return self._last_timestamp_ms

    def _register(self, batch: UploadBatch) -> None:
        self._batches[batch.batch_id] = batch
        finished = [batch_id for batch_id, b in self._batches.items() if b.is_finished]
        for batch_id in finished[:max(0, len(finished) - MAX_FINISHED_BATCHES)]:
            del self._batches[batch_id]
