"""
Upload API routes.
Handles HTTP endpoints for chunked file uploads and their status.
"""
import logging
import os
import shutil
import tempfile
from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile, status
from src.core.auth_dependencies import verify_token
from src.core.dependencies import get_upload_service
from src.models.dto.file_dto import FileUploadStatusResponse, UploadBatchResponse, UploadStatusResponse
from src.models.file_source import PathFileSource
from src.services.upload_service import UploadBatch, UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/api", tags=["Uploads"])


@router.post("/uploads", response_model=UploadBatchResponse, status_code=status.HTTP_202_ACCEPTED)
async def upload_files(
    background_tasks: BackgroundTasks,
    files: List[UploadFile] = File(..., description="Files to upload, processed in order"),
    upload_service: UploadService = Depends(get_upload_service),
    user_id: str = Depends(verify_token)
):
    """
    Upload one or more files.
    
    Size, type and storage quota are checked before anything is uploaded.
    The files are then uploaded in chunks in the background; poll
    **/uploads/batches/{batch_id}** for progress.

    Batches are held in memory by the process that accepted them. Behind
    Mangum on Lambda, batch status and cancel requests served by another
    invocation or container return 404; the persisted per-file status at
    **/uploads/{upload_id}** is readable from any instance.
    """
    sources = [_spool(upload) for upload in files]
    paths = [source.path for source in sources]
    
    try:
        batch = upload_service.prepare_batch(sources, user_id)
    except Exception:
        _remove_files(paths)
        raise
    
    background_tasks.add_task(_run_batch, upload_service, batch, paths)
    return _batch_response(batch, f"Upload of {len(files)} file(s) started")


@router.get("/uploads/batches/{batch_id}", response_model=UploadBatchResponse)
async def get_batch_status(
    batch_id: str,
    upload_service: UploadService = Depends(get_upload_service),
    user_id: str = Depends(verify_token)
):
    """
    Get live progress of every file in an upload batch.

    Only batches accepted by this process are found.
    """
    batch = upload_service.get_batch(batch_id, user_id)
    return _batch_response(batch)


@router.post("/uploads/batches/{batch_id}/cancel", response_model=UploadBatchResponse, status_code=status.HTTP_202_ACCEPTED)
async def cancel_batch(
    batch_id: str,
    upload_service: UploadService = Depends(get_upload_service),
    user_id: str = Depends(verify_token)
):
    """
    Cancel an upload batch. Chunks already in flight finish; nothing new starts.
    
    Cancelling a batch twice, or a finished batch, is harmless.
    Only batches accepted by this process can be cancelled.
    """
    batch = upload_service.cancel_upload(batch_id, user_id)
    return _batch_response(batch, "Cancellation requested")


@router.get("/uploads/{upload_id}", response_model=UploadStatusResponse)
async def get_upload_status(
    upload_id: str,
    upload_service: UploadService = Depends(get_upload_service),
    user_id: str = Depends(verify_token)
):
    """
    Get the recorded status of one file upload.
    """
    upload_status = upload_service.get_upload_status(upload_id, user_id)
    return UploadStatusResponse(
        upload_id=upload_status.upload_id,
        status=upload_status.status,
        filename=upload_status.filename,
        created_at=upload_status.created_at,
        updated_at=upload_status.updated_at,
        batch_id=upload_status.batch_id,
        object_key=upload_status.object_key,
        file_id=upload_status.file_id,
        total_chunks=upload_status.total_chunks,
        completed_chunks=upload_status.completed_chunks,
        bytes_transferred=upload_status.bytes_transferred,
        failed_chunks=upload_status.failed_chunks,
        error_message=upload_status.error_message
    )


async def _run_batch(upload_service: UploadService, batch: UploadBatch, paths: List[str]) -> None:
    try:
        await upload_service.run_batch(batch)
    finally:
        _remove_files(paths)


def _spool(upload: UploadFile) -> PathFileSource:
    """Copy a form upload to a temporary file that outlives the request."""
    suffix = os.path.splitext(upload.filename or "")[1]
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        shutil.copyfileobj(upload.file, tmp)
    return PathFileSource(tmp.name, upload.content_type, name=upload.filename or os.path.basename(tmp.name))


def _remove_files(paths: List[str]) -> None:
    for path in paths:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Could not remove temporary upload file %s: %s", path, e)


def _batch_response(batch: UploadBatch, message: str = "") -> UploadBatchResponse:
    files = []
    for task in batch.tasks:
        snapshot = task.snapshot()
        files.append(FileUploadStatusResponse(
            upload_id=task.upload_id,
            file_name=task.file_identity.name,
            file_size=task.file_identity.size,
            status=task.status,
            progress=round(snapshot.percent, 2),
            throughput_bytes_per_sec=snapshot.throughput_bytes_per_sec,
            file_id=task.file_id,
            error_message=task.error_message,
            failed_chunks=task.failed_chunk_indices
        ))
    return UploadBatchResponse(
        batch_id=batch.batch_id,
        status=batch.status,
        message=message,
        files=files
    )
