"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from blog_api import __version__
from blog_api.api.v1 import router as v1_router
from blog_api.core.config import Settings, get_settings
from blog_api.core.database import build_engine, build_session_factory
from blog_api.core.errors import register_error_handlers
from blog_api.core.log_config import configure_logging
from blog_api.core.rate_limit import build_limiter, enforce_rate_limit, parse_rate_limit
from blog_api.core.tokens import TokenCodec

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cross-Origin-Opener-Policy": "same-origin",
}


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application around one immutable Settings instance.

    Engine, session factory, token codec and rate limiter are created here and
    kept on app.state; request dependencies read them from there.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Blog API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.DEBUG,
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_codec = TokenCodec(settings)
    app.state.limiter = build_limiter(settings)
    app.state.rate_limits = parse_rate_limit(settings.RATE_LIMIT)

    register_error_handlers(app)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else settings.WHITELIST_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        v1_router,
        prefix=settings.API_V1_PREFIX,
        dependencies=[Depends(enforce_rate_limit)],
    )

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Blog API"}

    logger.info(
        "Application configured",
        extra={"app_env": settings.APP_ENV, "api_prefix": settings.API_V1_PREFIX},
    )
    return app


app = create_app()
