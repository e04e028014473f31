"""
Chunk transport for the upload pipeline.
Performs exactly one upload attempt of one chunk to S3.
"""
import asyncio
from functools import partial
from src.core.exceptions import S3Exception, ObjectExistsException, TransportError
from src.repositories.s3_repository import S3Repository


class ChunkTransport:
    """Single-shot chunk uploader. Retry policy belongs to the caller."""
    
    def __init__(self, s3_repository: S3Repository = None):
        self.s3_repository = s3_repository or S3Repository()
    
    async def send(self, object_key: str, data: bytes, content_type: str, is_first_chunk: bool) -> None:
        """
        Upload one chunk.
        
        Only the first chunk may overwrite an existing object, so a re-upload at
        the same key can replace it while later parts never silently clobber data.
        
        Raises:
            TransportError: network, server_rejected or aborted
        """
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                partial(
                    self.s3_repository.put_object,
                    object_key,
                    data,
                    content_type,
                    allow_overwrite=is_first_chunk
                )
            )
        except ObjectExistsException as e:
            raise TransportError(e.message, kind=TransportError.SERVER_REJECTED) from e
        except S3Exception as e:
            # An error code means S3 answered; no code means the request never completed
            kind = TransportError.SERVER_REJECTED if e.code else TransportError.NETWORK
            raise TransportError(e.message, kind=kind) from e
