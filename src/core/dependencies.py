"""
Dependency injection container for FastAPI.
Provides singleton-like behavior for services and repositories.
"""
from functools import lru_cache
from src.repositories.s3_repository import S3Repository
from src.repositories.db_repository import DBRepository
from src.repositories.dynamo_repository import DynamoRepository
from src.repositories.upload_status_repository import UploadStatusRepository
from src.repositories.user_profile_repository import UserProfileRepository
from src.services.file_service import FileService
from src.services.payment_service import PaymentService
from src.services.storage_service import StorageService
from src.services.upload_service import UploadService


@lru_cache()
def get_s3_repository() -> S3Repository:
    """Get S3Repository singleton instance."""
    return S3Repository()


@lru_cache()
def get_dynamo_repository() -> DBRepository:
    """Get DBRepository singleton instance."""
    return DynamoRepository()


@lru_cache()
def get_user_profile_repository() -> UserProfileRepository:
    """Get UserProfileRepository singleton instance."""
    return UserProfileRepository()


@lru_cache()
def get_upload_status_repository() -> UploadStatusRepository:
    """Get UploadStatusRepository singleton instance."""
    return UploadStatusRepository()


@lru_cache()
def get_file_service() -> FileService:
    """Get FileService singleton instance."""
    return FileService()


@lru_cache()
def get_upload_service() -> UploadService:
    """
    Get UploadService singleton instance with injected dependencies.

    The instance holds the in-memory registry of upload batches, so it must
    be shared by the upload, batch status and cancel endpoints.
    """
    return UploadService(
        s3_repository=get_s3_repository(),
        db_repository=get_dynamo_repository(),
        user_profile_repository=get_user_profile_repository(),
        upload_status_repository=get_upload_status_repository(),
        file_service=get_file_service()
    )


@lru_cache()
def get_storage_service() -> StorageService:
    """Get StorageService singleton instance with injected dependencies."""
    return StorageService(
        s3_repository=get_s3_repository(),
        db_repository=get_dynamo_repository(),
        user_profile_repository=get_user_profile_repository()
    )


@lru_cache()
def get_payment_service() -> PaymentService:
    """Get PaymentService singleton instance with injected dependencies."""
    return PaymentService(user_profile_repository=get_user_profile_repository())


def clear_caches() -> None:
    """Drop all cached instances, e.g. after settings change."""
    for getter in (
        get_s3_repository,
        get_dynamo_repository,
        get_user_profile_repository,
        get_upload_status_repository,
        get_file_service,
        get_upload_service,
        get_storage_service,
        get_payment_service
    ):
        getter.cache_clear()
