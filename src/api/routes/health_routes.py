"""
Health check routes for monitoring.
"""
from datetime import datetime
from fastapi import APIRouter
from src.core import config

router = APIRouter(prefix="/v1/api", tags=["Health"])


@router.get("/health")
async def health_check():
    """Liveness probe. Does not touch S3 or DynamoDB."""
    settings = config.settings
    return {
        "status": "healthy",
        "service": settings.api_title,
        "version": settings.api_version,
        "environment": settings.environment,
        "timestamp": datetime.utcnow().isoformat()
    }
