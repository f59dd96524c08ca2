"""Pydantic schemas for request/response validation."""

from threadboard.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from threadboard.schemas.posts import ContentRequest, CreatedResponse
from threadboard.schemas.users import UpdateProfileRequest, UserMeResponse

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "ContentRequest",
    "CreatedResponse",
    "UpdateProfileRequest",
    "UserMeResponse",
]
