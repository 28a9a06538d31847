"""Health endpoints."""

from __future__ import annotations

import importlib.metadata
from datetime import datetime, timezone

from fastapi import APIRouter

from ..schemas import HealthResponse

router = APIRouter(prefix="", tags=["health"])


def _package_version() -> str:
    try:
        return importlib.metadata.version("portfolio-backend")
    except importlib.metadata.PackageNotFoundError:  # pragma: no cover - dev installs
        return "0.0.0"


@router.get("/health", response_model=HealthResponse, summary="API liveness")
async def health_status() -> HealthResponse:
    return HealthResponse(
        version=_package_version(),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


__all__ = ["router"]
