"""Shared builders for tests: test settings, SQLite sessions and an app client."""

import re

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from blog_api.core.config import Settings
from blog_api.core.database import build_engine, build_session_factory
from blog_api.models import Base

ACCESS_SECRET = "test-access-secret-0123456789abcdef0123"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef012"
ADMIN_EMAIL = "admin@example.com"


def make_settings(**overrides: object) -> Settings:
    """Settings for an in-memory SQLite database with fast bcrypt and no rate limit."""
    values: dict[str, object] = {
        "APP_ENV": "test",
        "DATABASE_URL": "sqlite://",
        "JWT_ACCESS_SECRET": ACCESS_SECRET,
        "JWT_REFRESH_SECRET": REFRESH_SECRET,
        "BCRYPT_ROUNDS": 4,
        "RATE_LIMIT_ENABLED": False,
        "WHITELIST_ADMINS_MAIL": frozenset({ADMIN_EMAIL}),
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_session(settings: Settings | None = None) -> Session:
    """Fresh in-memory database with all tables created."""
    engine = build_engine(settings or make_settings())
    Base.metadata.create_all(engine)
    return build_session_factory(engine)()


def make_client(settings: Settings | None = None) -> TestClient:
    from blog_api.main import create_app

    app = create_app(settings or make_settings())
    Base.metadata.create_all(app.state.engine)
    return TestClient(app)


def refresh_cookie_from(response) -> str | None:
    """Value of the refreshToken cookie set by response, or None."""
    header = response.headers.get("set-cookie", "")
    match = re.search(r"refreshToken=([^;,\s]*)", header)
    if match is None:
        return None
    return match.group(1).strip('"')


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def refresh_cookie_header(token: str) -> dict[str, str]:
    return {"Cookie": f"refreshToken={token}"}
