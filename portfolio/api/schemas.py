"""Pydantic schemas used by the portfolio API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "OK"
    version: str
    timestamp: str


class DashboardStats(BaseModel):
    """Content counts shown on the admin dashboard."""

    projects: int = 0
    skills: int = 0
    experience: int = 0
    testimonials: int = 0
    featuredProjects: int = 0


class ConnectionStatus(BaseModel):
    """Health snapshot of the connection manager."""

    type: str = Field(..., description="Active backend: remote or local")
    isConnected: bool
    isHealthy: bool
    retries: int = 0
    hasHeartbeat: bool = False
    lastError: Optional[str] = None
    responseTime: Optional[float] = Field(None, description="Probe round trip in milliseconds")
    timestamp: str


__all__ = ["HealthResponse", "DashboardStats", "ConnectionStatus"]
