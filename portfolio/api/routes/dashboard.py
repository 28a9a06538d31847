"""Admin dashboard endpoints backed by the connection manager."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ...db.manager import ConnectionManager
from ..dependencies import get_db
from ..schemas import ConnectionStatus, DashboardStats

router = APIRouter(prefix="/api/admin/dashboard", tags=["dashboard"])
logger = logging.getLogger(__name__)

_COUNT_QUERIES = {
    "projects": "SELECT COUNT(*) AS count FROM projects",
    "skills": "SELECT COUNT(*) AS count FROM skills",
    "experience": "SELECT COUNT(*) AS count FROM experience",
    "testimonials": "SELECT COUNT(*) AS count FROM testimonials",
    "featuredProjects": "SELECT COUNT(*) AS count FROM projects WHERE featured = ?",
}


@router.get("/stats", response_model=DashboardStats, summary="Content counts")
async def dashboard_stats(db: ConnectionManager = Depends(get_db)) -> Any:
    try:
        stats: dict[str, int] = {}
        for key, sql in _COUNT_QUERIES.items():
            params = (1,) if "?" in sql else None
            row = await db.execute_read_one(sql, params)
            stats[key] = int(row["count"]) if row else 0
        return DashboardStats(**stats)
    except Exception as exc:
        logger.error("Error in dashboard stats: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )


@router.get(
    "/connection-status",
    response_model=ConnectionStatus,
    summary="Database connection health",
)
async def connection_status(db: ConnectionManager = Depends(get_db)) -> Any:
    try:
        snapshot = await db.get_health_snapshot()
        return ConnectionStatus(**snapshot.to_dict())
    except Exception as exc:
        logger.error("Error in connection status: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": str(exc),
                "type": "unknown",
                "isConnected": False,
                "isHealthy": False,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )


__all__ = ["router"]
