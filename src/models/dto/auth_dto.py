"""
Data Transfer Objects for authentication endpoints.
"""
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials exchanged for an access token."""
    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., min_length=1, description="Password")


class LoginResponse(BaseModel):
    """Access token scoped to the authenticated user's files."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user_id: str = Field(..., description="Authenticated user id, used to namespace stored files")
