"""Signing and verification of access and refresh JWTs."""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import jwt
from pydantic import BaseModel

from blog_api.core.config import Settings

TokenType = Literal["access", "refresh"]

REQUIRED_CLAIMS = ["sub", "exp", "iat", "jti", "type"]


class TokenError(Exception):
    """Base class for token verification failures."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class TokenExpired(TokenError):
    """The token's exp claim is in the past."""


class TokenInvalidSignature(TokenError):
    """The signature does not match the expected secret."""


class TokenMalformed(TokenError):
    """The token cannot be parsed, lacks required claims, or has the wrong type."""


class TokenPayload(BaseModel):
    """Verified claims of an access or refresh token."""

    subject: str
    token_type: TokenType
    token_id: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _numeric_date(value: Any, claim: str, token_type: TokenType) -> datetime:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TokenMalformed(f"{token_type} token has non-numeric {claim}")
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise TokenMalformed(f"{token_type} token has out-of-range {claim}", cause=e) from e


class TokenCodec:
    """
    Issue and verify the two token classes.

    Access and refresh tokens use independent secrets and lifetimes, so a
    token of one class never verifies as the other.
    """

    def __init__(
        self,
        settings: Settings,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._algorithm = settings.JWT_ALGORITHM
        self._secrets: dict[TokenType, str] = {
            "access": settings.JWT_ACCESS_SECRET.get_secret_value(),
            "refresh": settings.JWT_REFRESH_SECRET.get_secret_value(),
        }
        self._lifetimes: dict[TokenType, timedelta] = {
            "access": timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            "refresh": timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES),
        }
        self._clock = clock

    @property
    def refresh_lifetime(self) -> timedelta:
        return self._lifetimes["refresh"]

    def issue_access_token(self, subject_id: str | int) -> str:
        return self._issue(subject_id, "access")

    def issue_refresh_token(self, subject_id: str | int) -> str:
        return self._issue(subject_id, "refresh")

    def verify_access_token(self, token: str) -> TokenPayload:
        return self._verify(token, "access")

    def verify_refresh_token(self, token: str) -> TokenPayload:
        return self._verify(token, "refresh")

    def _issue(self, subject_id: str | int, token_type: TokenType) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "type": token_type,
            # jti keeps tokens issued at the same instant distinct
            "jti": uuid.uuid4().hex,
            # Fractional NumericDates so expiry lands exactly on iat + lifetime
            "iat": now.timestamp(),
            "exp": (now + self._lifetimes[token_type]).timestamp(),
        }
        return jwt.encode(payload, self._secrets[token_type], algorithm=self._algorithm)

    def _verify(self, token: str, token_type: TokenType) -> TokenPayload:
        """
        Decode and validate a token of the given type.

        Raises TokenExpired, TokenInvalidSignature or TokenMalformed.
        """
        try:
            claims = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self._algorithm],
                options={
                    "require": REQUIRED_CLAIMS,
                    # expiry is checked against self._clock below
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise TokenInvalidSignature(f"{token_type} token signature mismatch", cause=e) from e
        except jwt.PyJWTError as e:
            raise TokenMalformed(f"{token_type} token malformed: {e!s}", cause=e) from e

        issued_at = _numeric_date(claims["iat"], "iat", token_type)
        expires_at = _numeric_date(claims["exp"], "exp", token_type)
        if self._clock() >= expires_at:
            raise TokenExpired(f"{token_type} token expired")
        if claims.get("type") != token_type:
            raise TokenMalformed(f"expected {token_type} token, got {claims.get('type')!r}")
        subject = claims.get("sub")
        if not subject:
            raise TokenMalformed(f"{token_type} token has empty subject")
        return TokenPayload(
            subject=str(subject),
            token_type=token_type,
            token_id=str(claims["jti"]),
            issued_at=issued_at,
            expires_at=expires_at,
        )
