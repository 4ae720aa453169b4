"""Request dependencies: app-scoped settings and codec, bearer authentication and role checks."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from blog_api.core.config import Settings
from blog_api.core.database import get_db
from blog_api.core.errors import AuthenticationError, AuthorizationError, NotFoundError
from blog_api.core.tokens import TokenCodec, TokenError, TokenExpired
from blog_api.models import User
from blog_api.services.credentials import find_by_id

security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def authenticate(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> int:
    """
    Require a valid Bearer access token and return the user id it was issued for.

    Signature-only check (no database access). The id is also stored on
    request.state.user_id for handlers that take the request directly.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access denied, no token provided")
    try:
        payload = codec.verify_access_token(credentials.credentials)
    except TokenExpired as e:
        raise AuthenticationError(
            "Access token expired, request a new one with refresh token"
        ) from e
    except TokenError as e:
        raise AuthenticationError("Access token invalid") from e
    try:
        user_id = int(payload.subject)
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Access token invalid") from e
    request.state.user_id = user_id
    return user_id


def authorize(*roles: str) -> Callable[..., User]:
    """Dependency factory: load the authenticated user and require one of roles (403 otherwise)."""

    def role_checker(
        user_id: Annotated[int, Depends(authenticate)],
        db: Annotated[Session, Depends(get_db)],
    ) -> User:
        user = find_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.role not in roles:
            raise AuthorizationError("Access denied, insufficient permissions")
        return user

    return role_checker
