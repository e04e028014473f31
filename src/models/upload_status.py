"""
Upload Status domain model.
Persisted report of a file upload's progress and outcome.
"""
from datetime import datetime
from typing import List, Optional


class UploadStatus:
    """Domain model for upload status tracking."""
    
    def __init__(
        self,
        upload_id: str,
        status: str,
        filename: str,
        user_id: str,
        created_at: datetime,
        batch_id: Optional[str] = None,
        object_key: Optional[str] = None,
        file_id: Optional[str] = None,
        total_chunks: int = 0,
        completed_chunks: int = 0,
        bytes_transferred: int = 0,
        failed_chunks: Optional[List[int]] = None,
        error_message: Optional[str] = None,
        updated_at: Optional[datetime] = None
    ):
        self.upload_id = upload_id
        self.status = status
        self.filename = filename
        self.user_id = user_id
        self.created_at = created_at
        self.batch_id = batch_id
        self.object_key = object_key
        self.file_id = file_id
        self.total_chunks = total_chunks
        self.completed_chunks = completed_chunks
        self.bytes_transferred = bytes_transferred
        self.failed_chunks = failed_chunks or []
        self.error_message = error_message
        self.updated_at = updated_at or created_at
    
    def __repr__(self):
        return f"UploadStatus(upload_id={self.upload_id}, status={self.status}, filename={self.filename})"
