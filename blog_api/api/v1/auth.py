"""Auth endpoints: register, login, refresh-token and logout."""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.orm import Session

from blog_api.api.v1.deps import authenticate, get_app_settings, get_token_codec
from blog_api.core.config import Settings
from blog_api.core.database import get_db
from blog_api.core.tokens import TokenCodec
from blog_api.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserPublic,
)
from blog_api.services import sessions

router = APIRouter()

REFRESH_COOKIE_NAME = "refreshToken"


def set_refresh_cookie(
    response: Response,
    token: str,
    settings: Settings,
    codec: TokenCodec,
) -> None:
    """HTTP-only, SameSite=strict cookie; Secure in production. Lives as long as the token."""
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=token,
        max_age=int(codec.refresh_lifetime.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=REFRESH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> AuthResponse:
    """
    Create an account; returns the access token and sets the refresh cookie.

    role=admin is only accepted for emails in WHITELIST_ADMINS_MAIL.
    """
    result = sessions.register(
        db,
        codec,
        email=body.email,
        password=body.password,
        role=body.role,
        admin_emails=settings.WHITELIST_ADMINS_MAIL,
        rounds=settings.BCRYPT_ROUNDS,
    )
    set_refresh_cookie(response, result.refresh_token, settings, codec)
    return AuthResponse(
        message="User registered successfully",
        user=UserPublic.model_validate(result.user),
        access_token=result.access_token,
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> AuthResponse:
    """
    Authenticate with email and password.
    Include the returned token in the Authorization header as: Bearer <accessToken>
    """
    result = sessions.login(db, codec, email=body.email, password=body.password)
    set_refresh_cookie(response, result.refresh_token, settings, codec)
    return AuthResponse(
        message="Login successful",
        user=UserPublic.model_validate(result.user),
        access_token=result.access_token,
    )


@router.post("/refresh-token", response_model=AccessTokenResponse)
def refresh_token(
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    refresh_cookie: Annotated[str | None, Cookie(alias=REFRESH_COOKIE_NAME)] = None,
) -> AccessTokenResponse:
    """Issue a new access token from the refresh cookie without re-entering credentials."""
    access_token = sessions.refresh(db, codec, refresh_cookie)
    return AccessTokenResponse(access_token=access_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    user_id: Annotated[int, Depends(authenticate)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    refresh_cookie: Annotated[str | None, Cookie(alias=REFRESH_COOKIE_NAME)] = None,
) -> Response:
    """Revoke the refresh token (if any) and clear its cookie. Always 204."""
    sessions.logout(db, refresh_cookie, user_id=user_id)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_cookie(response, settings)
    return response
