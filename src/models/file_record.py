"""
Domain model for a stored file.
Database-agnostic representation of a committed upload.
"""
import uuid
from datetime import datetime
from typing import Optional


class FileRecord:
    """Domain model representing one uploaded file owned by a user."""
    
    def __init__(
        self,
        user_id: str,
        file_url: str,
        object_key: str,
        file_name: str,
        file_type: str,
        file_size: int,
        total_chunks: int = 1,
        file_id: Optional[str] = None,
        uploaded_at: Optional[datetime] = None
    ):
        self.file_id = file_id or str(uuid.uuid4())
        self.user_id = user_id
        self.file_url = file_url
        self.object_key = object_key
        self.file_name = file_name
        self.file_type = file_type
        self.file_size = file_size
        self.total_chunks = total_chunks
        self.uploaded_at = uploaded_at or datetime.utcnow()
    
    def __repr__(self):
        return f"FileRecord(file_id={self.file_id}, file_name={self.file_name}, file_size={self.file_size})"
