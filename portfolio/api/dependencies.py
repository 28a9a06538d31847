"""Shared dependency helpers for the FastAPI surface."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from ..db.manager import ConnectionManager


def get_db(request: Request) -> ConnectionManager:
    """The process-wide connection manager created at startup."""
    manager = getattr(request.app.state, "db", None)
    if manager is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not initialized",
        )
    return manager


__all__ = ["get_db"]
