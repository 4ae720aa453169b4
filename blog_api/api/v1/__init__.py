"""API v1 routes."""

from datetime import UTC, datetime

from fastapi import APIRouter

from blog_api import __version__
from blog_api.api.v1 import auth, health, users
from blog_api.schemas.health import ApiStatusResponse

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])


@router.get("/", response_model=ApiStatusResponse)
def api_status() -> ApiStatusResponse:
    """Liveness payload for the v1 prefix."""
    return ApiStatusResponse(version=__version__, timestamp=datetime.now(UTC))
