"""Process-wide logging setup."""

import logging

from blog_api.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def configure_logging(settings: Settings) -> None:
    """Configure the root logger once; tests only see warnings and above."""
    level = logging.WARNING if settings.APP_ENV == "test" else settings.LOG_LEVEL
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    logging.getLogger("blog_api").setLevel(level)
