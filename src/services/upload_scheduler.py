"""
Upload Scheduler.
Drives the chunks of one file through the retry governor under a concurrency
policy, aggregates progress and applies the cancellation and failure policies.
"""
import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from src.core.exceptions import (
    ChunkReadException,
    ChunkSizeMismatchException,
    ChunkUploadFailedException,
    MediaVaultException,
    UploadCancelledException
)
from src.models.concurrency_policy import ConcurrencyPolicy, FIXED_BATCH, SLIDING_WINDOW
from src.models.upload_chunk import UploadChunk
from src.models.upload_task import UploadTask, ProgressSnapshot, COMPLETE, CANCELLED, FAILED
from src.services.retry_governor import RetryGovernor

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressSnapshot], None]
ChunkReader = Callable[[UploadChunk], bytes]


@dataclass
class SchedulerResult:
    """Terminal outcome of scheduling one file's chunks."""
    status: str
    failed_chunk_indices: List[int] = field(default_factory=list)
    errors: Dict[int, MediaVaultException] = field(default_factory=dict)


class _RunState:
    """Mutable bookkeeping for one run, touched only on the event loop thread."""

    def __init__(self):
        self.errors: Dict[int, MediaVaultException] = {}
        self.cancelled = False
        self.aborted = False

    @property
    def stopped(self) -> bool:
        return self.cancelled or self.aborted


class UploadScheduler:
    """Runs a file's chunk plan to completion, cancellation or failure."""

    def __init__(self, retry_governor: RetryGovernor):
        self.retry_governor = retry_governor

    async def run(
        self,
        task: UploadTask,
        chunks: List[UploadChunk],
        read_chunk: ChunkReader,
        content_type: str,
        policy: ConcurrencyPolicy,
        cancellation: asyncio.Event,
        progress_sink: Optional[ProgressSink] = None
    ) -> SchedulerResult:
        """
        Upload every chunk of a task.

        The task moves to uploading here, and to cancelled or failed when the
        run ends that way. A run where every chunk succeeded returns COMPLETE
        and leaves the task uploading until the file is committed.

        Args:
            task: The file's UploadTask, in pending state
            chunks: Planned chunks in index order
            read_chunk: Returns the bytes of a chunk
            content_type: MIME type of the file
            policy: Concurrency policy
            cancellation: Batch cancellation event
            progress_sink: Called with a snapshot after every chunk success

        Returns:
            SchedulerResult
        """
        if not chunks:
            raise ValueError("A chunk plan always has at least one chunk")

        task.start(len(chunks), chunks[0].object_key)
        state = _RunState()
        logger.info(
            "Uploading %s in %d chunk(s) with policy %s",
            task.file_identity.name, len(chunks), policy
        )

        args = (task, read_chunk, content_type, cancellation, progress_sink, state)
        if policy.kind == FIXED_BATCH:
            await self._run_fixed_batch(chunks, policy.size, *args)
        elif policy.kind == SLIDING_WINDOW:
            await self._run_sliding_window(chunks, policy.size, *args)
        else:
            await self._run_sequential(chunks, *args)

        return self._finish(task, state)

    async def _run_sequential(self, chunks, task, read_chunk, content_type, cancellation, progress_sink, state):
        for chunk in chunks:
            if cancellation.is_set():
                state.cancelled = True
                break
            failed = await self._run_chunk(chunk, task, read_chunk, content_type, cancellation, progress_sink, state)
            if failed:
                state.aborted = True
            if state.stopped:
                break

    async def _run_fixed_batch(self, chunks, size, task, read_chunk, content_type, cancellation, progress_sink, state):
        for wave_start in range(0, len(chunks), size):
            wave = []
            for chunk in chunks[wave_start:wave_start + size]:
                if cancellation.is_set():
                    state.cancelled = True
                    break
                wave.append(asyncio.ensure_future(
                    self._run_chunk(chunk, task, read_chunk, content_type, cancellation, progress_sink, state)
                ))

            if wave:
                outcomes = await asyncio.gather(*wave, return_exceptions=True)
                self._raise_unexpected(outcomes)
                failures = sum(1 for failed in outcomes if failed)
                if failures > len(wave) / 2:
                    logger.error(
                        "%d of %d chunks failed in wave starting at chunk %d, aborting %s",
                        failures, len(wave), wave_start, task.file_identity.name
                    )
                    state.aborted = True

            if state.stopped:
                break

    async def _run_sliding_window(self, chunks, size, task, read_chunk, content_type, cancellation, progress_sink, state):
        window = min(size, len(chunks))
        recent_failures = deque(maxlen=window)
        queue = iter(chunks)
        exhausted = False
        pending = set()

        while True:
            while not state.stopped and not exhausted and len(pending) < window:
                if cancellation.is_set():
                    state.cancelled = True
                    break
                chunk = next(queue, None)
                if chunk is None:
                    exhausted = True
                    break
                pending.add(asyncio.ensure_future(
                    self._run_chunk(chunk, task, read_chunk, content_type, cancellation, progress_sink, state)
                ))

            if not pending:
                break

            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for future in done:
                if future.exception() is not None:
                    for other in pending:
                        other.cancel()
                    await asyncio.gather(*pending, return_exceptions=True)
                    raise future.exception()
                recent_failures.append(future.result())

            if not state.aborted and sum(recent_failures) > window / 2:
                logger.error(
                    "%d of the last %d chunks failed, aborting %s",
                    sum(recent_failures), window, task.file_identity.name
                )
                state.aborted = True

    async def _run_chunk(self, chunk, task, read_chunk, content_type, cancellation, progress_sink, state) -> bool:
        """Upload one chunk and settle its outcome. Returns True if the chunk failed."""
        try:
            data = await self._read_chunk(read_chunk, chunk)
            result = await self.retry_governor.upload_with_retry(chunk, data, content_type, cancellation)
        except UploadCancelledException:
            state.cancelled = True
            return False
        except (ChunkReadException, ChunkSizeMismatchException) as e:
            logger.error("%s", e.message)
            state.errors[chunk.index] = e
            state.aborted = True
            return True
        except ChunkUploadFailedException as e:
            logger.error("%s", e.message)
            state.errors[chunk.index] = e
            return True

        snapshot = task.record_chunk(chunk.size_bytes)
        logger.info(
            "Chunk %d/%d of %s uploaded in %.2fs at %.1f MB/s (%d attempt(s)), progress %.1f%%",
            chunk.index + 1, task.total_chunks, task.file_identity.name,
            result.elapsed_seconds, result.speed_mb_per_sec, result.attempts_used, snapshot.percent
        )
        if progress_sink:
            progress_sink(snapshot)
        return False

    async def _read_chunk(self, read_chunk: ChunkReader, chunk: UploadChunk) -> bytes:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, read_chunk, chunk)
        except OSError as e:
            raise ChunkReadException(chunk.index, e) from e

    def _raise_unexpected(self, outcomes) -> None:
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

    def _finish(self, task: UploadTask, state: _RunState) -> SchedulerResult:
        failed_indices = sorted(state.errors)

        if state.cancelled:
            task.cancel()
            logger.info(
                "Upload of %s cancelled after %d/%d chunks",
                task.file_identity.name, task.completed_chunks, task.total_chunks
            )
            return SchedulerResult(CANCELLED, failed_indices, state.errors)

        if state.errors:
            first = state.errors[failed_indices[0]]
            message = f"{len(failed_indices)} chunk(s) failed: {first.message}"
            task.fail(message, failed_indices)
            return SchedulerResult(FAILED, failed_indices, state.errors)

        if task.completed_chunks != task.total_chunks:
            task.fail(f"Only {task.completed_chunks} of {task.total_chunks} chunks were uploaded")
            return SchedulerResult(FAILED)

        return SchedulerResult(COMPLETE)
