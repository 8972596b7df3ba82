"""Drawboard API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Middleware order fixed by build_middleware(): panic -> request id -> access log -> CORS -> auth
    - Global error handlers map DrawboardError / RequestValidationError -> {error, message, details?}
    - Settings passed explicitly to create_app; nothing downstream reads the environment
    - Database engine created on startup and disposed on shutdown via lifespan

Design Decisions:
    - App factory + module-level `app`: uvicorn imports drawboard.main:app, tests build
      their own app with their own Settings
    - Graceful shutdown delegated to uvicorn (timeout_graceful_shutdown): it stops
      accepting connections first, drains in-flight requests, then runs lifespan shutdown
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from drawboard.api.error_handlers import register_error_handlers
from drawboard.api.middleware import build_middleware
from drawboard.api.routes import auth, drawings, health
from drawboard.config import Settings, get_settings
from drawboard.infrastructure.database import DatabaseSessionManager
from drawboard.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the ASGI application for the given settings."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        app.state.db_manager = DatabaseSessionManager(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        logger.info("Drawboard API started")
        yield
        logger.info("Drawboard API shutting down")
        await app.state.db_manager.dispose()

    app = FastAPI(
        title="Drawboard API",
        version="1.0.0",
        lifespan=lifespan,
        middleware=build_middleware(settings),
    )
    app.state.settings = settings

    # Routes — explicit registration
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(drawings.router)

    register_error_handlers(app)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve drawboard.main:app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "drawboard.main:app",
        host=settings.server_host,
        port=settings.server_port,
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
        log_config=None,
    )


if __name__ == "__main__":
    run()
