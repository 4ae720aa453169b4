"""Migration environment for the Blog API schema.

The database URL comes from ``sqlalchemy.url`` when a caller sets it on the
Alembic config, otherwise from ``Settings.DATABASE_URL``.
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

os.environ.setdefault("APP_ENV", "dev")
from blog_api.core.config import get_settings
from blog_api.models import Base  # registers User and RefreshToken on Base.metadata

config = context.config

if config.config_file_name is not None and config.file_config.has_section("formatters"):
    fileConfig(config.config_file_name)


def database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_settings().DATABASE_URL


def configure_context(url: str, **options) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        # SQLite can only ALTER through table copies
        render_as_batch=url.startswith("sqlite"),
        **options,
    )


def run_migrations() -> None:
    url = database_url()
    if context.is_offline_mode():
        configure_context(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
        with context.begin_transaction():
            context.run_migrations()
        return

    engine = create_engine(url, poolclass=NullPool)
    try:
        with engine.connect() as connection:
            configure_context(url, connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


run_migrations()
