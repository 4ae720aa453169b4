"""Pydantic request/response schemas."""

from blog_api.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserPublic,
)
from blog_api.schemas.health import ApiStatusResponse, HealthResponse
from blog_api.schemas.user import UserProfile, UserUpdateRequest, UsersListResponse

__all__ = [
    "AccessTokenResponse",
    "ApiStatusResponse",
    "AuthResponse",
    "HealthResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserProfile",
    "UserPublic",
    "UserUpdateRequest",
    "UsersListResponse",
]
