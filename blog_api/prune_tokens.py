"""
CLI entrypoint for pruning expired refresh tokens. Run from cron, e.g.:

  python -m blog_api.prune_tokens

Or hourly: 0 * * * * cd /path/to/blog-api && .venv/bin/python -m blog_api.prune_tokens
"""

import logging
import sys
from datetime import UTC, datetime

from blog_api.core.config import get_settings
from blog_api.core.database import build_engine, build_session_factory
from blog_api.core.log_config import configure_logging
from blog_api.services.refresh_tokens import purge_expired_refresh_tokens

logger = logging.getLogger(__name__)


def main() -> int:
    """Delete refresh token rows whose embedded expiry has lapsed."""
    settings = get_settings()
    configure_logging(settings)
    session_factory = build_session_factory(build_engine(settings))
    db = session_factory()
    try:
        deleted = purge_expired_refresh_tokens(db, datetime.now(UTC))
        logger.info("Token pruning completed: tokens_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Token pruning failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
