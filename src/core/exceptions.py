"""
Custom exceptions for the Media Vault API.
Provides specific error types for different failure scenarios.
"""
from typing import Optional


class MediaVaultException(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationException(MediaVaultException):
    """Raised when data validation fails."""
    pass


# Precondition errors: detected before any network call, never retried.

class PreconditionException(MediaVaultException):
    """Raised when an upload cannot start."""
    pass


class NotAuthenticatedException(PreconditionException):
    """Raised when no user identity is available for an upload."""
    pass


class QuotaExceededException(PreconditionException):
    """Raised when a batch would exceed the user's storage limit."""
    def __init__(self, message: str, storage_used: int, storage_limit: int, requested: int):
        super().__init__(message)
        self.storage_used = storage_used
        self.storage_limit = storage_limit
        self.requested = requested


class FileTooLargeException(PreconditionException):
    """Raised when a file exceeds the maximum upload size."""
    pass


class UnsupportedFileTypeException(PreconditionException):
    """Raised when a file's type or extension is not accepted."""
    pass


class ChunkSizeMismatchException(PreconditionException):
    """Raised when the bytes read for a chunk do not match its planned size."""
    def __init__(self, chunk_index: int, expected: int, actual: int):
        super().__init__(
            f"Chunk size mismatch for chunk {chunk_index}: expected {expected}, got {actual}"
        )
        self.chunk_index = chunk_index
        self.expected = expected
        self.actual = actual


# Transport and pipeline errors

class TransportError(MediaVaultException):
    """Raised when a single chunk upload attempt fails."""

    NETWORK = "network"
    SERVER_REJECTED = "server_rejected"
    ABORTED = "aborted"

    def __init__(self, message: str, kind: str = NETWORK):
        super().__init__(message)
        self.kind = kind


class AttemptTimeoutError(TransportError):
    """Raised when a chunk upload attempt does not finish within its deadline."""
    def __init__(self, message: str):
        super().__init__(message, kind=TransportError.ABORTED)


class ChunkUploadFailedException(MediaVaultException):
    """Raised when a chunk exhausted its retry budget."""
    def __init__(self, chunk_index: int, attempts: int, last_error: Exception):
        super().__init__(
            f"Chunk {chunk_index} failed after {attempts} attempt(s): {last_error}"
        )
        self.chunk_index = chunk_index
        self.attempts = attempts
        self.last_error = last_error


class ChunkReadException(MediaVaultException):
    """Raised when the bytes of a chunk cannot be read from the source file."""
    def __init__(self, chunk_index: int, error: Exception):
        super().__init__(f"Could not read chunk {chunk_index}: {error}")
        self.chunk_index = chunk_index
        self.error = error


class UploadCancelledException(MediaVaultException):
    """Raised when an upload observes a cancellation request."""
    pass


class CommitException(MediaVaultException):
    """Raised when a fully uploaded file cannot be registered."""

    REFERENCE = "reference"
    INSERT = "insert"

    def __init__(self, message: str, stage: str):
        super().__init__(message)
        self.stage = stage


# Infrastructure errors

class S3Exception(MediaVaultException):
    """Raised when S3 operation fails."""
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class ObjectExistsException(S3Exception):
    """Raised when an upload would overwrite an object that must not be replaced."""
    def __init__(self, message: str):
        super().__init__(message, code="ObjectExists")


class DynamoDBException(MediaVaultException):
    """Raised when DynamoDB operation fails."""
    pass


# Lookup and account errors

class FileNotFoundException(MediaVaultException):
    """Raised when a file record is not found for the user."""
    pass


class UploadNotFoundException(MediaVaultException):
    """Raised when an upload or upload batch is not known."""
    pass


class PaymentVerificationException(MediaVaultException):
    """Raised when a plan upgrade payment cannot be verified."""
    pass
