"""
Data Transfer Objects for file and upload endpoints.
Defines request and response schemas for API endpoints.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class FileUploadStatusResponse(BaseModel):
    """Status of one file within an upload batch."""
    upload_id: str = Field(..., description="Unique identifier for the file upload")
    file_name: str = Field(..., description="Original file name")
    file_size: int = Field(..., description="Declared size in bytes")
    status: str = Field(..., description="pending, uploading, complete, cancelled or failed")
    progress: float = Field(default=0.0, description="Percentage of chunks uploaded")
    throughput_bytes_per_sec: float = Field(default=0.0, description="Average upload speed")
    file_id: Optional[str] = Field(default=None, description="File record id once committed")
    error_message: Optional[str] = None
    failed_chunks: List[int] = Field(default_factory=list)


class UploadBatchResponse(BaseModel):
    """Response schema for an upload batch."""
    batch_id: str = Field(..., description="Identifier used to poll or cancel the batch")
    status: str = Field(..., description="Overall batch status")
    message: str = Field(default="", description="Status message")
    files: List[FileUploadStatusResponse]


class UploadStatusResponse(BaseModel):
    """Response schema for persisted upload status query."""
    upload_id: str
    status: str
    filename: str
    created_at: datetime
    updated_at: datetime
    batch_id: Optional[str] = None
    object_key: Optional[str] = None
    file_id: Optional[str] = None
    total_chunks: int = 0
    completed_chunks: int = 0
    bytes_transferred: int = 0
    failed_chunks: List[int] = Field(default_factory=list)
    error_message: Optional[str] = None


class FileRecordResponse(BaseModel):
    """Response schema for a stored file."""
    file_id: str
    file_name: str
    file_type: str
    file_size: int
    file_url: str
    uploaded_at: datetime
    
    class Config:
        from_attributes = True


class FileListResponse(BaseModel):
    """Response schema for listing a user's files."""
    files: list[FileRecordResponse]
    count: int
    next_token: Optional[str] = None


class StorageUsageResponse(BaseModel):
    """Response schema for the user's storage quota."""
    plan_type: str
    storage_used: int
    storage_limit: int
    storage_available: int
    storage_percentage: float
    warning_level: Optional[str] = Field(default=None, description="'warning' above 90%, 'full' at the limit")
