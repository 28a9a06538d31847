"""Data layer for the portfolio backend.

A local SQLite file is always available; a hosted SQLite Cloud database is
used instead when SQLITECLOUD_CONNECTION_STRING is set and reachable.

Examples:
    Local only:  PORTFOLIO_DB_PATH=data/portfolio.db
    Cloud:       SQLITECLOUD_CONNECTION_STRING=sqlitecloud://host:8860/portfolio.db?apikey=...
"""

from .base import (
    BackendKind,
    ConnectionLostError,
    DatabaseBackend,
    DatabaseError,
    HealthSnapshot,
    QueryError,
    RemoteUnavailableError,
    WriteResult,
    is_connection_error,
)
from .manager import ConnectionManager, ManagerConfig

__all__ = [
    "BackendKind",
    "ConnectionLostError",
    "ConnectionManager",
    "DatabaseBackend",
    "DatabaseError",
    "HealthSnapshot",
    "ManagerConfig",
    "QueryError",
    "RemoteUnavailableError",
    "WriteResult",
    "is_connection_error",
]
