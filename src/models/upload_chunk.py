"""
Upload chunk domain model.
One contiguous byte range of a source file and the object key it is stored under.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class UploadChunk:
    """
    Immutable descriptor of one chunk of a file.

    Attributes:
        index: 0-based position of the chunk within its file
        start: First byte offset (inclusive)
        end: Last byte offset (exclusive)
        object_key: Destination key in the object store
    """
    index: int
    start: int
    end: int
    object_key: str

    @property
    def size_bytes(self) -> int:
        return self.end - self.start
