"""
File sources for the upload pipeline.
A file handle that can report its identity and read arbitrary byte ranges.
"""
import os
from abc import ABC, abstractmethod
from src.models.upload_task import FileIdentity


class FileSource(ABC):
    """Readable file handed to the upload orchestrator."""
    
    def __init__(self, name: str, content_type: str):
        self.name = name
        self.content_type = content_type or "application/octet-stream"
    
    @property
    @abstractmethod
    def size(self) -> int:
        """Declared size in bytes."""
        pass
    
    @abstractmethod
    def read_range(self, start: int, end: int) -> bytes:
        """Read bytes [start, end)."""
        pass
    
    def identity(self) -> FileIdentity:
        return FileIdentity(name=self.name, size=self.size, content_type=self.content_type)


class BytesFileSource(FileSource):
    """File already held in memory, e.g. a multipart form upload."""
    
    def __init__(self, name: str, content_type: str, data: bytes):
        super().__init__(name, content_type)
        self._data = data
    
    @property
    def size(self) -> int:
        return len(self._data)
    
    def read_range(self, start: int, end: int) -> bytes:
        return self._data[start:end]


class PathFileSource(FileSource):
    """File on local disk, read chunk by chunk."""
    
    def __init__(self, path: str, content_type: str, name: str = None):
        super().__init__(name or os.path.basename(path), content_type)
        self.path = path
    
    @property
    def size(self) -> int:
        return os.path.getsize(self.path)
    
    def read_range(self, start: int, end: int) -> bytes:
        with open(self.path, 'rb') as f:
            f.seek(start)
            return f.read(end - start)
