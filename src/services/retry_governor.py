"""
Retry Governor for chunk uploads.
Wraps the chunk transport with bounded retries, exponential backoff,
a per-attempt deadline and cancellation polling between attempts.
"""
import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable
from src.core.exceptions import (
    AttemptTimeoutError,
    ChunkSizeMismatchException,
    ChunkUploadFailedException,
    TransportError,
    UploadCancelledException
)
from src.models.upload_chunk import UploadChunk
from src.services.chunk_transport import ChunkTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkUploadResult:
    """Outcome of a successfully uploaded chunk."""
    index: int
    size_bytes: int
    attempts_used: int
    elapsed_seconds: float

    @property
    def speed_mb_per_sec(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.size_bytes / self.elapsed_seconds / 1024 / 1024


class RetryGovernor:
    """Retry policy around ChunkTransport.send."""

    def __init__(
        self,
        transport: ChunkTransport,
        max_attempts: int,
        base_delay: float,
        per_attempt_timeout: float,
        jitter: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.transport = transport
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.per_attempt_timeout = per_attempt_timeout
        self.jitter = jitter
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Delay after failed attempt `attempt` (0-based): base_delay * 2**attempt."""
        delay = self.base_delay * (2 ** attempt)
        if self.jitter:
            delay += random.uniform(-self.base_delay, self.base_delay)
        return max(0.0, delay)

    async def upload_with_retry(
        self,
        chunk: UploadChunk,
        data: bytes,
        content_type: str,
        cancellation: asyncio.Event
    ) -> ChunkUploadResult:
        """
        Upload one chunk, retrying transport failures.

        Args:
            chunk: Chunk descriptor
            data: The chunk's bytes
            content_type: MIME type of the whole file
            cancellation: Batch cancellation event, polled before every attempt

        Returns:
            ChunkUploadResult with attempts used and elapsed time

        Raises:
            ChunkSizeMismatchException: If data does not match the planned size
            UploadCancelledException: If cancellation is observed before an attempt
            ChunkUploadFailedException: If every attempt failed
        """
        if len(data) != chunk.size_bytes:
            raise ChunkSizeMismatchException(chunk.index, chunk.size_bytes, len(data))

        started = time.monotonic()
        last_error = None

        for attempt in range(self.max_attempts):
            if cancellation.is_set():
                raise UploadCancelledException(
                    f"Upload of chunk {chunk.index} cancelled before attempt {attempt + 1}"
                )

            try:
                await asyncio.wait_for(
                    self.transport.send(chunk.object_key, data, content_type, chunk.index == 0),
                    timeout=self.per_attempt_timeout
                )
                elapsed = time.monotonic() - started
                return ChunkUploadResult(
                    index=chunk.index,
                    size_bytes=chunk.size_bytes,
                    attempts_used=attempt + 1,
                    elapsed_seconds=elapsed
                )
            except asyncio.TimeoutError:
                last_error = AttemptTimeoutError(
                    f"Chunk {chunk.index} attempt {attempt + 1} timed out after {self.per_attempt_timeout}s"
                )
            except TransportError as e:
                last_error = e

            logger.warning(
                "Chunk %d attempt %d/%d failed (%s): %s",
                chunk.index, attempt + 1, self.max_attempts, last_error.kind, last_error.message
            )

            if attempt < self.max_attempts - 1:
                await self._sleep(self.backoff_delay(attempt))

        raise ChunkUploadFailedException(chunk.index, self.max_attempts, last_error) from last_error
