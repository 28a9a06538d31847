"""SQLite Cloud backend for the hosted database."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Check if the SQLite Cloud driver is available
try:
    import sqlitecloud
    from sqlitecloud.datatypes import SQLITECLOUD_INTERNAL_ERRCODE
    from sqlitecloud.exceptions import SQLiteCloudError

    SQLITECLOUD_AVAILABLE = True
except ImportError:
    SQLITECLOUD_AVAILABLE = False
    sqlitecloud = None  # type: ignore[assignment]
    SQLITECLOUD_INTERNAL_ERRCODE = None  # type: ignore[assignment]
    SQLiteCloudError = None  # type: ignore[assignment]

from .base import (  # noqa: E402
    BackendKind,
    ConnectionLostError,
    DatabaseBackend,
    Params,
    QueryError,
    Row,
    Rows,
    WriteResult,
    is_connection_error,
    is_insert_statement,
    sanitize_connection_string,
)
from .results import first_row, normalize_rows  # noqa: E402
from .sql import render_sql  # noqa: E402

# (raw rows, column names, lastrowid, rowcount)
RawResult = Tuple[Any, Optional[List[str]], Optional[int], int]


def is_network_failure(error: BaseException) -> bool:
    """True for driver errors tagged with the driver's NETWORK error code."""
    if not SQLITECLOUD_AVAILABLE or not isinstance(error, SQLiteCloudError):
        return False
    # errcode is either the enum member or its int value
    code = getattr(error.errcode, "value", error.errcode)
    return code == SQLITECLOUD_INTERNAL_ERRCODE.NETWORK.value


def _default_connect(connection_string: str) -> Any:
    return sqlitecloud.connect(connection_string)


class SQLiteCloudBackend(DatabaseBackend):
    """Hosted SQLite Cloud connection.

    The driver is blocking, so every call runs in a worker thread. Statements
    are sent as fully rendered text (see :mod:`portfolio.db.sql`); driver
    errors are re-raised as :class:`ConnectionLostError` or
    :class:`QueryError` so the manager can decide whether to reconnect.
    """

    kind = BackendKind.REMOTE

    def __init__(
        self,
        connection_string: str,
        connect: Optional[Callable[[str], Any]] = None,
    ):
        if connect is None and not SQLITECLOUD_AVAILABLE:
            raise RuntimeError(
                "sqlitecloud is required for the cloud database. "
                "Install it with: pip install sqlitecloud"
            )

        self._connection_string = connection_string
        self._connect = connect or _default_connect
        self._conn: Any = None
        # The driver shares one socket; calls from worker threads take turns
        self._io_lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> None:
        if self._conn is not None:
            return

        logger.info(
            f"Connecting to SQLite Cloud: {sanitize_connection_string(self._connection_string)}"
        )
        try:
            self._conn = await asyncio.to_thread(self._connect, self._connection_string)
        except Exception as e:
            raise ConnectionLostError(f"SQLite Cloud connection failed: {e}") from e

        # Verify the link before anyone relies on it
        await self.ping()
        logger.info("SQLite Cloud connection established")

    async def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        await asyncio.to_thread(conn.close)
        logger.info("SQLite Cloud connection closed")

    def _run_blocking(self, conn: Any, statement: str) -> RawResult:
        with self._io_lock:
            cursor = conn.execute(statement)
            description = getattr(cursor, "description", None)
            columns = [col[0] for col in description] if description else None
            rows = cursor.fetchall() if description else []
            lastrowid = getattr(cursor, "lastrowid", None)
            rowcount = getattr(cursor, "rowcount", -1)
        return rows, columns, lastrowid, rowcount

    async def _run(self, sql: str, parameters: Params) -> RawResult:
        statement = render_sql(sql, parameters)
        conn = self._conn
        if conn is None:
            raise ConnectionLostError("SQLite Cloud connection is not connected")
        try:
            return await asyncio.to_thread(self._run_blocking, conn, statement)
        except Exception as e:
            if is_network_failure(e) or is_connection_error(e):
                raise ConnectionLostError(str(e)) from e
            raise QueryError(str(e)) from e

    async def fetch_all(self, sql: str, parameters: Params = None) -> Rows:
        raw, columns, _, _ = await self._run(sql, parameters)
        return normalize_rows(raw, columns)

    async def fetch_one(self, sql: str, parameters: Params = None) -> Optional[Row]:
        raw, columns, _, _ = await self._run(sql, parameters)
        return first_row(raw, columns)

    async def execute(self, sql: str, parameters: Params = None) -> WriteResult:
        _, _, lastrowid, rowcount = await self._run(sql, parameters)
        inserted_id = lastrowid if is_insert_statement(sql) and lastrowid else None
        return WriteResult(inserted_id=inserted_id, rows_affected=max(rowcount or 0, 0))
