"""
Finalizer for completed uploads.
Resolves the canonical object reference and commits the file record.
"""
import asyncio
import logging
from functools import partial
from typing import List
from src.core.exceptions import CommitException, MediaVaultException
from src.models.file_record import FileRecord
from src.models.upload_chunk import UploadChunk
from src.models.upload_task import UploadTask
from src.repositories.db_repository import DBRepository
from src.repositories.s3_repository import S3Repository

logger = logging.getLogger(__name__)


class Finalizer:
    """Registers a fully uploaded file as a FileRecord."""

    def __init__(self, s3_repository: S3Repository, db_repository: DBRepository):
        self.s3_repository = s3_repository
        self.db_repository = db_repository

    @staticmethod
    def reference_key(chunks: List[UploadChunk]) -> str:
        """
        Object key that stands for the whole file.

        For multi-part files this is the .part0 object; the other parts are
        not reassembled.
        """
        return chunks[0].object_key

    async def commit(self, task: UploadTask, chunks: List[UploadChunk], user_id: str) -> FileRecord:
        """
        Commit the metadata record of an uploaded file.

        Args:
            task: UploadTask whose chunks all succeeded
            chunks: The file's chunk plan
            user_id: Owner of the file

        Returns:
            The inserted FileRecord

        Raises:
            CommitException: If the reference lookup or the insert fails
        """
        loop = asyncio.get_running_loop()
        key = self.reference_key(chunks)
        if len(chunks) > 1:
            logger.info("Multi-chunk upload of %s uses first chunk %s as reference", task.file_identity.name, key)

        try:
            file_url = await loop.run_in_executor(None, self.s3_repository.get_reference, key)
        except MediaVaultException as e:
            raise CommitException(f"Failed to resolve reference for {key}: {e.message}", CommitException.REFERENCE) from e

        record = FileRecord(
            user_id=user_id,
            file_url=file_url,
            object_key=key,
            file_name=task.file_identity.name,
            file_type=task.file_identity.content_type,
            file_size=task.file_identity.size,
            total_chunks=len(chunks)
        )

        try:
            await loop.run_in_executor(None, partial(self.db_repository.save, record))
        except MediaVaultException as e:
            raise CommitException(f"Failed to save file record for {task.file_identity.name}: {e.message}", CommitException.INSERT) from e

        logger.info("Committed file record %s for %s (%d bytes)", record.file_id, record.file_name, record.file_size)
        return record
