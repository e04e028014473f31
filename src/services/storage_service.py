"""
Storage Service for browsing and managing stored files.
Orchestrates file record and object operations between API and repositories.
"""
import logging
from typing import Optional, Tuple
from src.models.dto.file_dto import FileRecordResponse, FileListResponse, StorageUsageResponse
from src.repositories.db_repository import DBRepository
from src.repositories.dynamo_repository import DynamoRepository
from src.repositories.s3_repository import S3Repository
from src.repositories.user_profile_repository import UserProfileRepository
from src.services import chunk_planner

logger = logging.getLogger(__name__)

WARNING_PERCENTAGE = 90
FULL_PERCENTAGE = 100


class StorageService:
    """Service for stored file and quota operations."""
    
    def __init__(
        self,
        s3_repository: S3Repository = None,
        db_repository: DBRepository = None,
        user_profile_repository: UserProfileRepository = None
    ):
        self.s3_repository = s3_repository or S3Repository()
        self.db_repository = db_repository or DynamoRepository()
        self.user_profile_repository = user_profile_repository or UserProfileRepository()
    
    def list_files(self, user_id: str, limit: int = 20, next_token: Optional[str] = None) -> Tuple[FileListResponse, Optional[str]]:
        """
        Retrieve a user's files, newest first, with pagination.
        
        Returns:
            Tuple of (FileListResponse, next_token or None)
            
        Raises:
            DynamoDBException: If query fails
            ValidationException: If next_token is invalid
        """
        records, next_token = self.db_repository.find_by_user_paginated(user_id, limit, next_token)
        
        files = [FileRecordResponse.model_validate(record) for record in records]
        
        return FileListResponse(files=files, count=len(files)), next_token
    
    def get_file(self, user_id: str, file_id: str) -> FileRecordResponse:
        """
        Raises:
            FileNotFoundException: If the file does not exist for this user
        """
        record = self.db_repository.find_by_id(user_id, file_id)
        return FileRecordResponse.model_validate(record)
    
    def delete_file(self, user_id: str, file_id: str) -> None:
        """
        Delete a file's objects, then its record.
        
        Every part of a multi-chunk file is removed, not only the reference object.
        
        Raises:
            FileNotFoundException: If the file does not exist for this user
            S3Exception: If the objects cannot be deleted
            DynamoDBException: If the record cannot be deleted
        """
        record = self.db_repository.find_by_id(user_id, file_id)
        
        base_key = record.object_key
        if record.total_chunks > 1:
            base_key = base_key[:-len(".part0")]
        keys = chunk_planner.object_keys_for(base_key, record.total_chunks)
        
        self.s3_repository.delete_objects(keys)
        self.db_repository.delete(user_id, file_id)
        logger.info("Deleted file %s (%s) with %d object(s)", file_id, record.file_name, len(keys))
    
    def get_storage_usage(self, user_id: str) -> StorageUsageResponse:
        """
        Get a user's plan and storage usage.
        
        Raises:
            DynamoDBException: If the profile cannot be read
        """
        profile = self.user_profile_repository.get_or_create(user_id)
        percentage = profile.storage_percentage
        
        warning_level = None
        if percentage >= FULL_PERCENTAGE:
            warning_level = "full"
        elif percentage > WARNING_PERCENTAGE:
            warning_level = "warning"
        
        return StorageUsageResponse(
            plan_type=profile.plan_type,
            storage_used=profile.storage_used,
            storage_limit=profile.storage_limit,
            storage_available=profile.storage_available,
            storage_percentage=round(percentage, 2),
            warning_level=warning_level
        )
