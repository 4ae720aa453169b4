"""Core app configuration, database, and token handling."""

from blog_api.core.config import Settings, get_settings
from blog_api.core.database import get_db

__all__ = ["Settings", "get_settings", "get_db"]
