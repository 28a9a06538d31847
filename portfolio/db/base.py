"""Base database abstractions shared by the local and cloud backends."""

from __future__ import annotations

import asyncio
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

# Rows are plain dicts keyed by column name
Row = Dict[str, Any]
Rows = List[Row]
Params = Optional[Sequence[Any]]

# Lower-cased substrings that mark a driver error as a transport problem
CONNECTION_ERROR_MARKERS = (
    "unavailable",
    "disconnected",
    "connection reset",
    "reset",
    "timeout",
    "timed out",
    "not connected",
    "connection closed",
    "connection is closed",
    "socket",
    "broken pipe",
)


class BackendKind(Enum):
    """Which store is executing queries."""

    LOCAL = "local"
    REMOTE = "remote"


class DatabaseError(Exception):
    """Base class for data layer errors."""


class ConnectionLostError(DatabaseError):
    """The remote transport is unusable right now."""


class QueryError(DatabaseError):
    """Non-transient failure: bad SQL, constraint violation, parameter mismatch."""


class RemoteUnavailableError(ConnectionLostError):
    """Reconnection exhausted its budget; the manager now serves from the local store."""


def is_connection_error(error: BaseException) -> bool:
    """Return True when ``error`` means the transport, not the query, failed."""
    if isinstance(error, QueryError):
        return False
    if isinstance(error, (ConnectionLostError, ConnectionError, TimeoutError, asyncio.TimeoutError)):
        return True
    message = str(error).lower()
    return any(marker in message for marker in CONNECTION_ERROR_MARKERS)


def is_insert_statement(sql: str) -> bool:
    head = sql.lstrip().upper()
    return head.startswith(("INSERT", "REPLACE"))


@dataclass
class WriteResult:
    """Outcome of an INSERT/UPDATE/DELETE."""

    inserted_id: Optional[int]
    rows_affected: int

    def to_dict(self) -> dict[str, Any]:
        return {"insertedId": self.inserted_id, "rowsAffected": self.rows_affected}


@dataclass
class HealthSnapshot:
    """Point-in-time view of the connection manager for the admin dashboard."""

    backend: BackendKind
    connected: bool
    healthy: bool
    last_error: Optional[str]
    response_time_ms: Optional[float]
    retries: int
    heartbeat_active: bool
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.backend.value,
            "isConnected": self.connected,
            "isHealthy": self.healthy,
            "retries": self.retries,
            "hasHeartbeat": self.heartbeat_active,
            "lastError": self.last_error,
            "responseTime": self.response_time_ms,
            "timestamp": self.timestamp,
        }


class DatabaseBackend(ABC):
    """Abstract base class for a single open connection to one store."""

    kind: BackendKind

    @abstractmethod
    async def open(self) -> None:
        """Open the underlying connection."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the connection and release resources."""
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    async def fetch_all(self, sql: str, parameters: Params = None) -> Rows:
        """Execute a query and return every row."""
        ...

    @abstractmethod
    async def fetch_one(self, sql: str, parameters: Params = None) -> Optional[Row]:
        """Execute a query and return the first row, or None."""
        ...

    @abstractmethod
    async def execute(self, sql: str, parameters: Params = None) -> WriteResult:
        """Execute a statement that modifies data."""
        ...

    async def ping(self) -> None:
        """Run a trivial probe query; raises when the store is unreachable."""
        await self.fetch_one("SELECT 1 AS ok")

    async def table_exists(self, table_name: str) -> bool:
        row = await self.fetch_one(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return row is not None


def sanitize_connection_string(conn_str: str) -> str:
    """Remove password and API key from a connection string for logging."""
    sanitized = re.sub(r":([^:@/]+)@", r":***@", conn_str)
    return re.sub(r"(apikey=)[^&]+", r"\1***", sanitized, flags=re.IGNORECASE)
