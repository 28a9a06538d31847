"""API route registration helpers."""

from fastapi import FastAPI

from . import dashboard, health


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the provided FastAPI instance."""

    app.include_router(health.router)
    app.include_router(dashboard.router)


__all__ = ["register_routes"]
