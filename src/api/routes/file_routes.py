"""
File API routes.
Handles HTTP endpoints for browsing and deleting stored files and storage usage.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from src.core import config
from src.core.auth_dependencies import verify_token
from src.core.dependencies import get_storage_service
from src.models.dto.file_dto import FileListResponse, FileRecordResponse, StorageUsageResponse
from src.services.storage_service import StorageService

router = APIRouter(prefix="/v1/api")


@router.get("/files", tags=["Files"], response_model=FileListResponse)
async def list_files(
    limit: Optional[int] = Query(default=None, ge=1, description="Maximum number of items to return"),
    next_token: Optional[str] = Query(default=None, description="Pagination token from previous response"),
    storage_service: StorageService = Depends(get_storage_service),
    user_id: str = Depends(verify_token)
):
    """
    Retrieve the caller's files, newest first, with pagination.
    
    - **limit**: Number of items per page (capped by the configured maximum)
    - **next_token**: Token from previous response to get next page
    """
    settings = config.settings
    limit = min(limit or settings.pagination_default_limit, settings.pagination_max_limit)
    response, token = storage_service.list_files(user_id, limit, next_token)
    response.next_token = token
    return response


@router.get("/files/{file_id}", tags=["Files"], response_model=FileRecordResponse)
async def get_file(
    file_id: str,
    storage_service: StorageService = Depends(get_storage_service),
    user_id: str = Depends(verify_token)
):
    """
    Retrieve one of the caller's files.
    """
    return storage_service.get_file(user_id, file_id)


@router.delete("/files/{file_id}", tags=["Files"], status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: str,
    storage_service: StorageService = Depends(get_storage_service),
    user_id: str = Depends(verify_token)
):
    """
    Delete one of the caller's files and all of its stored objects.
    """
    storage_service.delete_file(user_id, file_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/storage", tags=["Storage"], response_model=StorageUsageResponse)
async def get_storage_usage(
    storage_service: StorageService = Depends(get_storage_service),
    user_id: str = Depends(verify_token)
):
    """
    Get the caller's plan, storage usage and limit.
    """
    return storage_service.get_storage_usage(user_id)
