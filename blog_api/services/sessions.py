"""
Session flows: register, login, refresh and logout.

Each flow raises an ApiError subclass on failure; the HTTP layer only moves
tokens between these functions and the response (body and cookie).
"""

import logging
from typing import NamedTuple

from sqlalchemy.orm import Session

from blog_api.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
)
from blog_api.core.security import BCRYPT_ROUNDS
from blog_api.core.tokens import TokenCodec, TokenError, TokenExpired
from blog_api.models import User
from blog_api.services.credentials import (
    DuplicateUserError,
    check_password,
    create_user,
    exists_by_email,
    find_by_email,
    generate_username,
)
from blog_api.services.refresh_tokens import (
    delete_refresh_token,
    refresh_token_exists,
    save_refresh_token,
)

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"


class SessionResult(NamedTuple):
    """Outcome of a successful register or login."""

    user: User
    access_token: str
    refresh_token: str


def _issue_session(db: Session, codec: TokenCodec, user: User) -> tuple[str, str]:
    """Issue an access/refresh pair and persist the refresh token."""
    access_token = codec.issue_access_token(user.id)
    refresh_token = codec.issue_refresh_token(user.id)
    expires_at = codec.verify_refresh_token(refresh_token).expires_at
    save_refresh_token(db, refresh_token, user.id, expires_at)
    return access_token, refresh_token


def _looks_like_jwt(token: str) -> bool:
    parts = token.split(".")
    return len(parts) == 3 and all(parts)


def register(
    db: Session,
    codec: TokenCodec,
    email: str | None,
    password: str | None,
    role: str | None = None,
    admin_emails: frozenset[str] = frozenset(),
    rounds: int = BCRYPT_ROUNDS,
) -> SessionResult:
    """
    Create an account and open a session for it.

    The admin allow-list is checked before anything is read or written, so a
    rejected escalation leaves no trace in the store.
    """
    normalized_email = (email or "").strip().lower()
    if role == ADMIN_ROLE and normalized_email not in admin_emails:
        logger.warning(
            "Admin registration rejected: email not in allow-list",
            extra={"email": normalized_email},
        )
        raise AuthorizationError("You cannot register as an admin")

    if not normalized_email or not password:
        raise InvalidRequestError("Email and password are required.")

    if exists_by_email(db, normalized_email):
        raise ConflictError("User with this email already exists.")

    try:
        user = create_user(
            db,
            username=generate_username(),
            email=normalized_email,
            password=password,
            role=role or DEFAULT_ROLE,
            rounds=rounds,
        )
    except DuplicateUserError as e:
        # Lost a race with a concurrent registration for the same email.
        raise ConflictError("User with this email already exists.") from e

    access_token, refresh_token = _issue_session(db, codec, user)
    logger.info(
        "User registered successfully",
        extra={"user_id": user.id, "username": user.username, "role": user.role},
    )
    return SessionResult(user, access_token, refresh_token)


def login(
    db: Session,
    codec: TokenCodec,
    email: str | None,
    password: str | None,
) -> SessionResult:
    """Verify credentials and open a new session. The password is checked exactly once."""
    if not email or not password:
        raise InvalidRequestError("Email and password are required")

    user = find_by_email(db, email)
    if user is None:
        raise NotFoundError("User not found")

    if not check_password(user, password):
        raise AuthenticationError("Invalid credentials", code="Unauthorized")

    access_token, refresh_token = _issue_session(db, codec, user)
    logger.info("User logged in successfully", extra={"user_id": user.id})
    return SessionResult(user, access_token, refresh_token)


def refresh(db: Session, codec: TokenCodec, refresh_token: str | None) -> str:
    """
    Exchange a stored, unexpired refresh token for a new access token.

    The store is consulted before the signature: a revoked token is rejected
    even while it would still verify.
    """
    if not refresh_token:
        raise InvalidRequestError("Refresh token required")
    if not _looks_like_jwt(refresh_token):
        raise InvalidRequestError("Invalid refresh token")

    if not refresh_token_exists(db, refresh_token):
        raise AuthenticationError("Invalid refresh token")

    try:
        payload = codec.verify_refresh_token(refresh_token)
    except TokenExpired as e:
        raise AuthenticationError("Refresh token expired, please login again") from e
    except TokenError as e:
        raise AuthenticationError("Invalid refresh token") from e

    return codec.issue_access_token(payload.subject)


def logout(db: Session, refresh_token: str | None, user_id: int | None = None) -> bool:
    """
    Revoke the refresh token if one was presented. Idempotent.

    Returns True when a stored token was deleted.
    """
    deleted = 0
    if refresh_token:
        deleted = delete_refresh_token(db, refresh_token)
        if deleted:
            logger.info("User refresh token deleted successfully", extra={"user_id": user_id})
    logger.info("User logged out successfully", extra={"user_id": user_id})
    return deleted > 0
