"""
Authentication API routes.
"""
import logging
from fastapi import APIRouter, HTTPException, status
from src.models.dto.auth_dto import LoginRequest, LoginResponse
from src.services.auth_service import authenticate_user, create_access_token, token_lifetime_seconds

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/api/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(request: LoginRequest):
    """
    Exchange username and password for a bearer token.

    The token subject is the user id that owns uploaded files and the storage profile.
    """
    user = authenticate_user(request.username, request.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )

    user_id = user['user_id']
    logger.info("User %s signed in", user_id)
    return LoginResponse(
        access_token=create_access_token(user_id, request.username),
        expires_in=token_lifetime_seconds(),
        user_id=user_id
    )
