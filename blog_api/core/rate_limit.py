"""Per-client request rate limiting, enforced as a router dependency."""

import logging

from fastapi import Request
from limits import RateLimitItem, parse_many
from slowapi import Limiter
from slowapi.util import get_remote_address

from blog_api.core.config import Settings
from blog_api.core.errors import TooManyRequestsError

logger = logging.getLogger(__name__)


def build_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.RATE_LIMIT],
        enabled=settings.RATE_LIMIT_ENABLED,
        storage_uri="memory://",
    )


def parse_rate_limit(value: str) -> list[RateLimitItem]:
    """Parse "60/minute" or "5/second;100/hour" into limit items."""
    return parse_many(value)


def enforce_rate_limit(request: Request) -> None:
    """Count the request against every configured window for the client address."""
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return
    key = get_remote_address(request)
    for item in request.app.state.rate_limits:
        if not limiter.limiter.hit(item, key):
            logger.warning(
                "Rate limit exceeded",
                extra={"path": request.url.path, "limit": str(item)},
            )
            raise TooManyRequestsError(f"Rate limit exceeded: {item}")
