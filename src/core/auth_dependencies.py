"""
FastAPI dependencies for JWT authentication.
Every file, upload and payment route resolves the caller's user id here.
"""
import logging
import jwt
from fastapi import Header, HTTPException, status
from typing import Optional
from src.core import config

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def verify_token(authorization: Optional[str] = Header(None)) -> str:
    """
    Resolve the user id from a "Bearer <token>" Authorization header.

    Returns:
        User id from the token subject

    Raises:
        HTTPException: 401 if the token is missing, malformed, expired or has no subject
    """
    if not authorization:
        raise _unauthorized("Missing authorization header")
    if not authorization.startswith(BEARER_PREFIX):
        raise _unauthorized("Invalid authorization header format")

    settings = config.settings
    try:
        payload = jwt.decode(
            authorization[len(BEARER_PREFIX):],
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected access token: %s", e)
        raise _unauthorized("Invalid token")

    user_id = payload.get('sub')
    if not user_id:
        raise _unauthorized("Invalid token payload")
    return user_id
