"""ORM model for blog accounts (authentication, roles and public profile)."""

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from blog_api.models.base import Base

USER_ROLES = ("user", "admin")


class User(Base):
    """
    Registered account.

    password_hash is written only by services.credentials (create_user, set_password)
    and is never part of a response schema.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")

    first_name = Column(String(20), nullable=True)
    last_name = Column(String(20), nullable=True)
    website = Column(String(100), nullable=True)
    facebook = Column(String(100), nullable=True)
    instagram = Column(String(100), nullable=True)
    x = Column(String(100), nullable=True)
    youtube = Column(String(100), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )
