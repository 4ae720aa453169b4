"""Schemas for the current-user profile and the admin user list."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blog_api.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from blog_api.schemas.auth import EmailAddress

URL_MAX_LEN = 100


class UserProfile(BaseModel):
    """Full profile of one account (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    first_name: str | None = None
    last_name: str | None = None
    website: str | None = None
    facebook: str | None = None
    instagram: str | None = None
    x: str | None = None
    youtube: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserUpdateRequest(BaseModel):
    """Partial update of the current user; omitted fields are left unchanged."""

    username: str | None = Field(default=None, min_length=1, max_length=20)
    email: EmailAddress | None = None
    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )
    first_name: str | None = Field(default=None, max_length=20)
    last_name: str | None = Field(default=None, max_length=20)
    website: str | None = Field(default=None, max_length=URL_MAX_LEN)
    facebook: str | None = Field(default=None, max_length=URL_MAX_LEN)
    instagram: str | None = Field(default=None, max_length=URL_MAX_LEN)
    x: str | None = Field(default=None, max_length=URL_MAX_LEN)
    youtube: str | None = Field(default=None, max_length=URL_MAX_LEN)

    @field_validator("username", "first_name", "last_name")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None

    @field_validator("website", "facebook", "instagram", "x", "youtube")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not (v.lower().startswith("http://") or v.lower().startswith("https://")):
            raise ValueError("Invalid URL")
        return v


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    limit: int
    offset: int
    total: int
    users: list[UserProfile]
