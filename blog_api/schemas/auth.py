"""Request/response schemas for auth endpoints."""

from typing import Annotated, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationError,
)

from blog_api.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN

EMAIL_MAX_LEN = 50

Role = Literal["user", "admin"]


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _lower_and_limit(value: str) -> str:
    email = value.lower()
    if len(email) > EMAIL_MAX_LEN:
        raise ValueError(f"Email must be less than {EMAIL_MAX_LEN} characters long")
    return email


# Syntax is checked by email-validator; addresses are stored lowercase.
EmailAddress = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(_lower_and_limit)]

_email_adapter = TypeAdapter(EmailAddress)


def normalize_email(value: str) -> str:
    """Validate an email address outside a request model (CLI input)."""
    try:
        return _email_adapter.validate_python(value)
    except ValidationError as exc:
        raise ValueError(exc.errors()[0]["msg"]) from exc


class RegisterRequest(BaseModel):
    """Body for POST /auth/register. role=admin is only honoured for allow-listed emails."""

    email: EmailAddress = Field(..., description="Email address (stored lowercase)")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )
    role: Role | None = Field(default=None, description="Requested role")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailAddress = Field(..., description="Email address")
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class UserPublic(BaseModel):
    """Public user fields returned by auth endpoints (never the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    username: str
    email: str
    role: str


class AuthResponse(BaseModel):
    """Body returned by register and login; the refresh token travels in a cookie."""

    message: str
    user: UserPublic
    access_token: str = Field(..., serialization_alias="accessToken")


class AccessTokenResponse(BaseModel):
    """Body returned by POST /auth/refresh-token."""

    access_token: str = Field(..., serialization_alias="accessToken")
