"""Refresh token store. Deleting a row revokes the token regardless of its signature."""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from blog_api.models import RefreshToken

logger = logging.getLogger(__name__)


def save_refresh_token(
    db: Session,
    token: str,
    user_id: int,
    expires_at: datetime,
) -> RefreshToken:
    row = RefreshToken(token=token, user_id=user_id, expires_at=expires_at)
    db.add(row)
    db.commit()
    logger.info("Refresh token created for user", extra={"user_id": user_id})
    return row


def refresh_token_exists(db: Session, token: str) -> bool:
    return db.query(RefreshToken.id).filter(RefreshToken.token == token).first() is not None


def delete_refresh_token(db: Session, token: str) -> int:
    """Delete the row for token; returns the number of rows removed (0 or 1)."""
    deleted = (
        db.query(RefreshToken)
        .filter(RefreshToken.token == token)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def purge_expired_refresh_tokens(db: Session, now: datetime) -> int:
    """
    Delete rows whose token expired before now. Idempotent: safe to run repeatedly.

    Returns the number of rows removed.
    """
    deleted = (
        db.query(RefreshToken)
        .filter(RefreshToken.expires_at < now)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted > 0:
        logger.info(
            "Expired refresh tokens purged: cutoff=%s, deleted=%s",
            now.isoformat(),
            deleted,
        )
    return deleted
