"""Account Service API — FastAPI application factory and entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map AccountServiceError → JSON `{message}` responses
    - CORS configured from settings (open to every origin by default)
    - Every request runs inside RequestContextMiddleware so its logs carry method and path
    - Connection pool built on startup and disposed on shutdown via lifespan
    - Settings and the user gateway reach handlers through app.state, never a
      module-level singleton

Design Decisions:
    - create_app() factory: tests build an app per settings object and swap the
      gateway through dependency_overrides
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from account_service.api.error_handlers import register_error_handlers
from account_service.api.routes import health, users
from account_service.config import Settings, get_settings
from account_service.infrastructure.database import DatabaseSessionManager
from account_service.infrastructure.observability import (
    RequestContextMiddleware, setup_logging,
)
from account_service.infrastructure.user_gateway import UserGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    db = DatabaseSessionManager(
        settings.resolved_database_url(),
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        ssl_enabled=settings.db_ssl,
    )
    app.state.user_gateway = UserGateway(db)
    logger.info(f"Server running on port {settings.port}")
    logger.info(f"Store host: {settings.store_host()}")
    if not settings.mask_passwords:
        logger.warning(
            "Passwords are stored and listed in plaintext; "
            "set MASK_PASSWORDS=true to mask them in /api/users",
        )
    yield
    logger.info("Account service shutting down")
    app.state.user_gateway = None
    await db.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application for the given settings."""
    settings = settings or get_settings()
    app = FastAPI(
        title="Account Service API", version="1.0.0", lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.include_router(health.router)
    app.include_router(users.router)

    register_error_handlers(app)
    return app


app = create_app()
