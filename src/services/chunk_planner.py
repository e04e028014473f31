"""
Chunk planning for the upload pipeline.
Splits a file into contiguous byte ranges and names their object keys.
"""
from typing import List
from src.models.upload_chunk import UploadChunk


def build_base_key(user_id: str, filename: str, timestamp_ms: int) -> str:
    """
    Build the object key of a file.
    
    Format: {user_id}/{timestamp_ms}.{ext}, where ext is the text after the
    last dot of the file name (the whole name if it has no dot).
    """
    ext = filename.rsplit('.', 1)[-1]
    return f"{user_id}/{timestamp_ms}.{ext}"


def chunk_count(file_size: int, chunk_size: int) -> int:
    """Number of chunks for a file; an empty file still has one."""
    return max(1, -(-file_size // chunk_size))


def object_keys_for(base_key: str, total_chunks: int) -> List[str]:
    """Object keys of every chunk of a file, in index order."""
    if total_chunks == 1:
        return [base_key]
    return [f"{base_key}.part{i}" for i in range(total_chunks)]


def plan(file_size: int, chunk_size: int, base_key: str) -> List[UploadChunk]:
    """
    Plan the chunks of a file.
    
    Args:
        file_size: File size in bytes
        chunk_size: Maximum chunk size in bytes
        base_key: Object key of the whole file
        
    Returns:
        Ordered list of UploadChunk covering [0, file_size) exactly
        
    Raises:
        ValueError: If chunk_size is not positive or file_size is negative
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if file_size < 0:
        raise ValueError(f"file_size must not be negative, got {file_size}")
    
    total_chunks = chunk_count(file_size, chunk_size)
    keys = object_keys_for(base_key, total_chunks)
    
    return [
        UploadChunk(
            index=i,
            start=i * chunk_size,
            end=min((i + 1) * chunk_size, file_size),
            object_key=keys[i]
        )
        for i in range(total_chunks)
    ]
