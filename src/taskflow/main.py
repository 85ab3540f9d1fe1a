"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (Redis, database pool).
Middleware, CORS, exception handlers and routers all registered here.

The database handle is built here and attached to app.state, so an app
created with different Settings (tests, the CLI) gets its own pool.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskflow import __version__
from taskflow.api import api_router
from taskflow.api.health import router as health_router
from taskflow.config import Settings, settings as default_settings
from taskflow.db.engine import Database
from taskflow.db.redis import close_redis, connect_redis
from taskflow.errors import register_exception_handlers
from taskflow.log import configure_logging
from taskflow.middleware.rate_limit import RateLimitMiddleware
from taskflow.middleware.request_id import RequestIdMiddleware
from taskflow.middleware.security import SecurityHeadersMiddleware
from taskflow.middleware.server_error import ErrorEnvelopeMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "taskflow.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    # Redis is optional; without it rate limiting is off
    app.state.redis = await connect_redis(settings.redis_url)

    yield

    # Shutdown
    logger.info("taskflow.shutdown")
    await close_redis(app.state.redis)
    app.state.redis = None
    await app.state.db.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="TaskFlow",
        description="Multi-tenant project and task management API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = Database(settings.database_url, echo=settings.debug)
    app.state.redis = None

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → ErrorEnvelope → RateLimit → Security → RequestId → handler
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_limit=settings.rate_limit_requests,
        auth_limit=settings.rate_limit_auth_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(ErrorEnvelopeMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskflow.main:app)
app = create_app()
