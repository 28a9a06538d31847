"""Local SQLite backend, the durable store beneath the cloud database."""

from __future__ import annotations

import logging
import os
from typing import Optional

import aiosqlite

from .base import (
    BackendKind,
    DatabaseBackend,
    Params,
    Row,
    Rows,
    WriteResult,
    is_insert_statement,
)
from .schema import ensure_schema

logger = logging.getLogger(__name__)


class SQLiteBackend(DatabaseBackend):
    """Single aiosqlite connection with bound parameters.

    Errors raised here are never retried by the connection manager.
    """

    kind = BackendKind.LOCAL

    def __init__(self, db_path: str, bootstrap_schema: bool = True, timeout: float = 30.0):
        self._db_path = db_path
        self._bootstrap_schema = bootstrap_schema
        self._timeout = timeout
        self._conn: Optional[aiosqlite.Connection] = None

        if db_path != ":memory:":
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> None:
        if self._conn is not None:
            return

        logger.info(f"Opening local SQLite database: {self._db_path}")
        conn = await aiosqlite.connect(self._db_path, timeout=self._timeout)
        conn.row_factory = aiosqlite.Row

        try:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA synchronous=NORMAL")
            await conn.execute("PRAGMA temp_store=memory")
            await conn.execute("PRAGMA busy_timeout=5000")
            await conn.commit()
        except Exception as e:
            logger.debug(f"Failed to set PRAGMA options: {e}")

        self._conn = conn
        if self._bootstrap_schema:
            await ensure_schema(self)

    async def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        await conn.close()
        logger.info("Local SQLite database closed")

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Local database is not open")
        return self._conn

    async def fetch_all(self, sql: str, parameters: Params = None) -> Rows:
        conn = self._connection()
        async with conn.execute(sql, tuple(parameters or ())) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def fetch_one(self, sql: str, parameters: Params = None) -> Optional[Row]:
        conn = self._connection()
        async with conn.execute(sql, tuple(parameters or ())) as cursor:
            row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def execute(self, sql: str, parameters: Params = None) -> WriteResult:
        conn = self._connection()
        try:
            async with conn.execute(sql, tuple(parameters or ())) as cursor:
                inserted_id = cursor.lastrowid if is_insert_statement(sql) else None
                rows_affected = max(cursor.rowcount, 0)
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise
        return WriteResult(inserted_id=inserted_id, rows_affected=rows_affected)
