"""
Core configuration for the Media Vault API.
Manages environment variables, AWS service settings and upload pipeline tuning.
"""
import json
import os
from typing import Dict, List
from pydantic_settings import BaseSettings
from src.core.parameter_store import get_secret

MB = 1024 * 1024
GB = 1024 * MB

DEFAULT_ACCEPTED_MIME_TYPES = {
    'image/*': ['.png', '.jpg', '.jpeg', '.gif', '.webp'],
    'video/*': ['.mp4', '.avi', '.mov', '.mkv'],
    'application/pdf': ['.pdf'],
    'application/msword': ['.doc'],
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document': ['.docx'],
    'text/plain': ['.txt'],
}


def _accepted_mime_types_from_env() -> Dict[str, List[str]]:
    raw = os.getenv("ACCEPTED_MIME_TYPES")
    if not raw:
        return dict(DEFAULT_ACCEPTED_MIME_TYPES)
    return json.loads(raw)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # AWS Configuration
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    s3_bucket_name: str = os.getenv("S3_BUCKET_NAME", "")
    file_records_table_name: str = os.getenv("FILE_RECORDS_TABLE_NAME", "")
    user_profiles_table_name: str = os.getenv("USER_PROFILES_TABLE_NAME", "")
    upload_status_table_name: str = os.getenv("UPLOAD_STATUS_TABLE_NAME", "")
    users_table_name: str = os.getenv("USERS_TABLE_NAME", "")

    # S3 object references
    s3_public_urls: bool = os.getenv("S3_PUBLIC_URLS", "false").lower() == "true"
    s3_url_expiration_seconds: int = int(os.getenv("S3_URL_EXPIRATION_SECONDS", "3600"))

    # API Configuration
    api_title: str = os.getenv("API_TITLE", "Media Vault API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    cors_allowed_origins: str = os.getenv("CORS_ALLOWED_ORIGINS", "*")

    # Upload pipeline
    chunk_size_bytes: int = int(os.getenv("CHUNK_SIZE_BYTES", str(5 * MB)))
    max_concurrent_uploads: int = int(os.getenv("MAX_CONCURRENT_UPLOADS", "6"))
    concurrency_policy: str = os.getenv("CONCURRENCY_POLICY", "sequential")
    per_attempt_timeout_ms: int = int(os.getenv("PER_ATTEMPT_TIMEOUT_MS", "90000"))
    max_retry_attempts: int = int(os.getenv("MAX_RETRY_ATTEMPTS", "2"))
    base_backoff_ms: int = int(os.getenv("BASE_BACKOFF_MS", "500"))
    backoff_jitter: bool = os.getenv("BACKOFF_JITTER", "false").lower() == "true"
    stop_batch_on_failure: bool = os.getenv("STOP_BATCH_ON_FAILURE", "false").lower() == "true"

    # File Upload Limits
    max_file_size_bytes: int = int(os.getenv("MAX_FILE_SIZE_BYTES", str(2 * GB)))
    accepted_mime_types: Dict[str, List[str]] = _accepted_mime_types_from_env()

    # Storage plans
    free_storage_limit_bytes: int = int(os.getenv("FREE_STORAGE_LIMIT_BYTES", str(2 * GB)))
    premium_storage_limit_bytes: int = int(os.getenv("PREMIUM_STORAGE_LIMIT_BYTES", str(10 * GB)))

    # Pagination Configuration
    pagination_default_limit: int = int(os.getenv("PAGINATION_DEFAULT_LIMIT", "20"))
    pagination_max_limit: int = int(os.getenv("PAGINATION_MAX_LIMIT", "100"))

    # Authentication
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_expiration_hours: int = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def jwt_secret(self) -> str:
        """JWT signing key from Parameter Store, or JWT_SECRET for local development."""
        fallback = os.getenv("JWT_SECRET", "dev-secret-change-in-production")
        return get_secret(self.environment, "jwt-secret", self.aws_region, fallback)

    @property
    def payment_secret(self) -> str:
        """Payment gateway key from Parameter Store, or empty if not configured."""
        return get_secret(self.environment, "payment-secret", self.aws_region, os.getenv("PAYMENT_SECRET_KEY", ""))

    # Environment
    environment: str = os.getenv("ENVIRONMENT", "dev")

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
