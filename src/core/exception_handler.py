"""
Global exception handler for the Media Vault API.
Provides centralized error handling for all API exceptions.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from .exceptions import (
    MediaVaultException,
    ValidationException,
    PreconditionException,
    NotAuthenticatedException,
    QuotaExceededException,
    FileTooLargeException,
    UnsupportedFileTypeException,
    FileNotFoundException,
    UploadNotFoundException,
    PaymentVerificationException,
    S3Exception,
    DynamoDBException,
    CommitException
)

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    
    @app.exception_handler(NotAuthenticatedException)
    async def handle_not_authenticated(request: Request, exc: NotAuthenticatedException):
        return JSONResponse(
            status_code=401,
            content={"error": "Not Authenticated", "message": exc.message}
        )
    
    @app.exception_handler(QuotaExceededException)
    async def handle_quota_exceeded(request: Request, exc: QuotaExceededException):
        return JSONResponse(
            status_code=507,
            content={
                "error": "Storage Limit Exceeded",
                "message": exc.message,
                "storage_used": exc.storage_used,
                "storage_limit": exc.storage_limit,
                "requested": exc.requested
            }
        )
    
    @app.exception_handler(FileTooLargeException)
    async def handle_file_too_large(request: Request, exc: FileTooLargeException):
        return JSONResponse(
            status_code=413,
            content={"error": "File Too Large", "message": exc.message}
        )
    
    @app.exception_handler(UnsupportedFileTypeException)
    async def handle_unsupported_type(request: Request, exc: UnsupportedFileTypeException):
        return JSONResponse(
            status_code=415,
            content={"error": "Unsupported File Type", "message": exc.message}
        )
    
    @app.exception_handler(ValidationException)
    async def handle_validation_error(request: Request, exc: ValidationException):
        return JSONResponse(
            status_code=400,
            content={"error": "Validation Error", "message": exc.message}
        )
    
    @app.exception_handler(PreconditionException)
    async def handle_precondition_error(request: Request, exc: PreconditionException):
        return JSONResponse(
            status_code=400,
            content={"error": "Upload Rejected", "message": exc.message}
        )
    
    @app.exception_handler(FileNotFoundException)
    async def handle_file_not_found(request: Request, exc: FileNotFoundException):
        return JSONResponse(
            status_code=404,
            content={"error": "Not Found", "message": exc.message}
        )
    
    @app.exception_handler(UploadNotFoundException)
    async def handle_upload_not_found(request: Request, exc: UploadNotFoundException):
        return JSONResponse(
            status_code=404,
            content={"error": "Not Found", "message": exc.message}
        )
    
    @app.exception_handler(PaymentVerificationException)
    async def handle_payment_error(request: Request, exc: PaymentVerificationException):
        return JSONResponse(
            status_code=400,
            content={"error": "Payment Verification Failed", "message": exc.message}
        )
    
    @app.exception_handler(S3Exception)
    async def handle_s3_error(request: Request, exc: S3Exception):
        logger.error("S3 error on %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=500,
            content={"error": "Storage Error", "message": exc.message}
        )
    
    @app.exception_handler(DynamoDBException)
    async def handle_dynamodb_error(request: Request, exc: DynamoDBException):
        logger.error("DynamoDB error on %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=500,
            content={"error": "Database Error", "message": exc.message}
        )
    
    @app.exception_handler(CommitException)
    async def handle_commit_error(request: Request, exc: CommitException):
        return JSONResponse(
            status_code=500,
            content={"error": "Upload Commit Failed", "message": exc.message}
        )
    
    @app.exception_handler(MediaVaultException)
    async def handle_application_error(request: Request, exc: MediaVaultException):
        logger.error("Unhandled application error on %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": exc.message}
        )
    
    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": "An unexpected error occurred"}
        )
