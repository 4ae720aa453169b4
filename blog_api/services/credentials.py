"""Credential store: user lookups and writes. Password hashing happens here and nowhere else."""

import logging
import secrets

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blog_api.core.security import BCRYPT_ROUNDS, hash_password, verify_password
from blog_api.models import User

logger = logging.getLogger(__name__)

USERNAME_PREFIX = "user-"

# Profile columns that update_profile may change; password is handled by set_password.
PROFILE_FIELDS = frozenset(
    {
        "username",
        "email",
        "first_name",
        "last_name",
        "website",
        "facebook",
        "instagram",
        "x",
        "youtube",
    }
)


class DuplicateUserError(Exception):
    """Raised when the database rejects a user because the email or username is taken."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


def generate_username() -> str:
    """Random username such as 'user-3f9a0c1b2d' (fits the 20-char column)."""
    return USERNAME_PREFIX + secrets.token_hex(5)


def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def find_by_id(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def exists_by_email(db: Session, email: str) -> bool:
    """Pre-flight check only; the unique index on users.email is the real guard."""
    return db.query(User.id).filter(User.email == email.strip().lower()).first() is not None


def exists_by_username(db: Session, username: str) -> bool:
    return db.query(User.id).filter(User.username == username).first() is not None


def check_password(user: User, plain_password: str) -> bool:
    """One-way comparison of a plaintext against the stored hash."""
    return verify_password(plain_password, user.password_hash)


def _commit_or_conflict(db: Session, what: str) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateUserError(f"{what}: email or username already in use", cause=e) from e


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: str = "user",
    rounds: int = BCRYPT_ROUNDS,
) -> User:
    """
    Insert a new user, hashing the plaintext password once.

    Raises DuplicateUserError when a concurrent insert already took the email or username.
    """
    user = User(
        username=username.strip(),
        email=email.strip().lower(),
        password_hash=hash_password(password, rounds=rounds),
        role=role,
    )
    db.add(user)
    _commit_or_conflict(db, "create_user")
    db.refresh(user)
    return user


def set_password(
    db: Session,
    user: User,
    plain_password: str,
    rounds: int = BCRYPT_ROUNDS,
) -> User:
    """Replace the stored hash. Always rehashes."""
    user.password_hash = hash_password(plain_password, rounds=rounds)
    db.commit()
    db.refresh(user)
    return user


def update_profile(db: Session, user: User, **fields: object) -> User:
    """Update profile columns; the password hash is never touched."""
    unknown = set(fields) - PROFILE_FIELDS
    if unknown:
        raise ValueError(f"Not profile fields: {', '.join(sorted(unknown))}")
    for name, value in fields.items():
        if name == "email" and isinstance(value, str):
            value = value.strip().lower()
        setattr(user, name, value)
    _commit_or_conflict(db, "update_profile")
    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    """Delete the account; its refresh tokens go with it."""
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info("User deleted", extra={"user_id": user_id})


def list_users(db: Session, limit: int, offset: int) -> tuple[int, list[User]]:
    """Return (total, page) ordered by id."""
    total = db.query(User).count()
    users = db.query(User).order_by(User.id).offset(offset).limit(limit).all()
    return total, users
