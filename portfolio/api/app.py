"""FastAPI application factory for the portfolio API."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config.settings import Settings
from ..db.manager import ConnectionManager, ManagerConfig
from .middleware.request_id import RequestIDLogFilter, RequestIDMiddleware, get_request_id
from .routes import register_routes

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def _install_request_id_filter() -> None:
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIDLogFilter) for f in handler.filters):
            handler.addFilter(RequestIDLogFilter())


def create_app(
    extra_app_kwargs: dict[str, Any] | None = None,
    manager: Optional[ConnectionManager] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The connection manager is built once per app and lives on ``app.state.db``;
    pass ``manager`` to supply a pre-configured one.
    """

    # Reload settings in case env vars changed before app startup
    Settings.refresh_from_env()

    app_kwargs: dict[str, Any] = {
        "title": "Portfolio API",
        "version": "1.0.0",
        "docs_url": "/docs",
        "redoc_url": "/redoc",
    }
    if extra_app_kwargs:
        app_kwargs.update(extra_app_kwargs)

    app = FastAPI(**app_kwargs)

    cors_origins = Settings.PORTFOLIO_API_CORS_ORIGINS or DEFAULT_CORS_ORIGINS
    if not Settings.PORTFOLIO_API_CORS_ORIGINS:
        logger.info("CORS: Using default development origins. Set PORTFOLIO_API_CORS_ORIGINS for production.")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials="*" not in cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestIDMiddleware)
    _install_request_id_filter()

    register_routes(app)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s (request %s)",
            request.method,
            request.url.path,
            get_request_id(),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Something went wrong!",
                "message": str(exc) if Settings.PORTFOLIO_DEV_MODE else "Internal server error",
            },
        )

    @app.on_event("startup")
    async def _startup() -> None:
        db = manager or ConnectionManager(ManagerConfig.from_settings())
        await db.initialize(Settings.SQLITECLOUD_CONNECTION_STRING)
        app.state.db = db
        logger.info(
            "Starting portfolio API on %s:%s (database: %s)",
            Settings.PORTFOLIO_API_HOST,
            Settings.PORTFOLIO_API_PORT,
            db.backend_kind.value,
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        logger.info("Shutting down portfolio API")
        db = getattr(app.state, "db", None)
        if db is not None:
            await db.shutdown()
            app.state.db = None

    return app


__all__ = ["create_app", "DEFAULT_CORS_ORIGINS"]
