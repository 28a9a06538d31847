"""Connection manager: one query surface over the local and cloud databases.

The manager owns exactly one open backend. When a cloud connection string is
configured it connects to SQLite Cloud, keeps the link alive with a periodic
heartbeat, and reconnects with backoff when the link drops. If the cloud
cannot be reached within the retry budget it switches to the local SQLite
file for the rest of the process.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

from .base import (
    BackendKind,
    ConnectionLostError,
    DatabaseBackend,
    HealthSnapshot,
    Params,
    RemoteUnavailableError,
    Row,
    Rows,
    WriteResult,
    is_connection_error,
)
from .cloud import SQLiteCloudBackend
from .sqlite import SQLiteBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")

RemoteFactory = Callable[[str], DatabaseBackend]
LocalFactory = Callable[[str], DatabaseBackend]


@dataclass
class ManagerConfig:
    """Tuning knobs for failover and health checking."""

    local_path: str = "data/portfolio.db"
    connect_timeout: float = 10.0
    max_retries: int = 3
    retry_delays: Tuple[float, ...] = (1.0, 3.0, 5.0)
    heartbeat_interval: float = 30.0

    @classmethod
    def from_settings(cls) -> "ManagerConfig":
        from ..config.settings import Settings

        return cls(
            local_path=Settings.PORTFOLIO_DB_PATH,
            connect_timeout=Settings.PORTFOLIO_DB_CONNECT_TIMEOUT,
            max_retries=Settings.PORTFOLIO_DB_MAX_RETRIES,
            retry_delays=tuple(Settings.PORTFOLIO_DB_RETRY_DELAYS),
            heartbeat_interval=Settings.PORTFOLIO_DB_HEARTBEAT_INTERVAL,
        )

    def delay_for(self, attempt: int) -> float:
        """Backoff before the attempt after ``attempt``; the last delay repeats."""
        if not self.retry_delays:
            return 0.0
        return self.retry_delays[min(attempt, len(self.retry_delays) - 1)]


class ConnectionManager:
    """Backend-agnostic query execution with cloud failover."""

    def __init__(
        self,
        config: Optional[ManagerConfig] = None,
        *,
        remote_factory: Optional[RemoteFactory] = None,
        local_factory: Optional[LocalFactory] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._config = config or ManagerConfig()
        self._remote_factory = remote_factory or SQLiteCloudBackend
        self._local_factory = local_factory or SQLiteBackend
        self._sleep = sleep

        self._remote_url: Optional[str] = None
        self._backend: Optional[DatabaseBackend] = None
        self._kind = BackendKind.LOCAL
        self._retries = 0
        self._last_error: Optional[str] = None

        self._initialized = False
        self._closed = False
        self._init_lock = asyncio.Lock()
        self._reconnect_task: Optional[asyncio.Task[bool]] = None
        self._heartbeat_task: Optional[asyncio.Task[None]] = None

    # -- state ---------------------------------------------------------------

    @property
    def backend_kind(self) -> BackendKind:
        return self._kind

    @property
    def is_connected(self) -> bool:
        return self._backend is not None and self._backend.is_open

    @property
    def retries(self) -> int:
        return self._retries

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def heartbeat_active(self) -> bool:
        return self._heartbeat_task is not None and not self._heartbeat_task.done()

    @property
    def reconnecting(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    # -- lifecycle -----------------------------------------------------------

    async def initialize(self, remote_url: Optional[str] = None) -> None:
        """Pick and open a backend. Later calls are no-ops.

        A failed first cloud connection is not retried: the cloud is treated
        as unavailable for this process and the local store is used.
        """
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return
            if self._closed:
                raise RuntimeError("Connection manager has been shut down")

            self._remote_url = remote_url.strip() if remote_url and remote_url.strip() else None

            if self._remote_url:
                try:
                    backend = await self._open_remote()
                except Exception as e:
                    self._last_error = str(e)
                    logger.warning(f"Cloud database unavailable ({e}); using local database")
                    await self._install_local()
                else:
                    self._install(backend)
                    self._start_heartbeat()
            else:
                logger.info("No cloud connection configured; using local database")
                await self._install_local()

            self._initialized = True
            logger.info(f"Connection manager initialized: {self._kind.value}")

    async def shutdown(self) -> None:
        """Stop background work and close the active backend. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        await self._stop_heartbeat()

        task = self._reconnect_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Reconnection ended with error during shutdown: {e}")
        self._reconnect_task = None

        backend, self._backend = self._backend, None
        if backend is not None:
            await self._close_quietly(backend)

        logger.info("Connection manager shut down")

    # -- query surface -------------------------------------------------------

    async def execute_read(self, sql: str, parameters: Params = None) -> Rows:
        """All matching rows; an empty list when nothing matched."""
        rows = await self._run(lambda backend: backend.fetch_all(sql, parameters))
        return list(rows or [])

    async def execute_read_one(self, sql: str, parameters: Params = None) -> Optional[Row]:
        """First matching row, or None."""
        return await self._run(lambda backend: backend.fetch_one(sql, parameters))

    async def execute_write(self, sql: str, parameters: Params = None) -> WriteResult:
        return await self._run(lambda backend: backend.execute(sql, parameters))

    async def get_health_snapshot(self) -> HealthSnapshot:
        """Probe the active backend once and report; a failed probe is not retried."""
        backend = self._backend
        healthy = False
        probe_error: Optional[str] = None
        response_time_ms: Optional[float] = None

        if backend is not None and backend.is_open:
            started = time.perf_counter()
            try:
                await backend.ping()
            except Exception as e:
                probe_error = str(e)
            else:
                response_time_ms = round((time.perf_counter() - started) * 1000, 2)
                healthy = True
        else:
            probe_error = "Database is not connected"

        return HealthSnapshot(
            backend=self._kind,
            connected=self.is_connected,
            healthy=healthy,
            last_error=probe_error,
            response_time_ms=response_time_ms,
            retries=self._retries,
            heartbeat_active=self.heartbeat_active,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    async def _run(self, operation: Callable[[DatabaseBackend], Awaitable[T]]) -> T:
        backend = self._require_backend()
        if backend.kind is BackendKind.LOCAL:
            return await operation(backend)

        try:
            return await operation(backend)
        except Exception as e:
            if not is_connection_error(e):
                raise
            self._last_error = str(e)
            logger.warning(f"Cloud query failed with connection error: {e}")

            if self._backend is backend or self.reconnecting:
                if not await self.reconnect():
                    raise RemoteUnavailableError(
                        "Cloud database unavailable; switched to local database"
                    ) from e
            # Handle replaced while we were waiting; retry exactly once
            return await operation(self._require_backend())

    def _require_backend(self) -> DatabaseBackend:
        if self._closed:
            raise RuntimeError("Connection manager has been shut down")
        if self._backend is None:
            raise RuntimeError("Connection manager not initialized. Call initialize() first.")
        return self._backend

    # -- reconnection --------------------------------------------------------

    async def reconnect(self) -> bool:
        """Re-establish the cloud connection, joining an attempt already in flight.

        Returns True when the cloud is connected afterwards, False when the
        manager is (now) serving from the local database. Raises
        ConnectionLostError when shutdown() interrupts the attempt.
        """
        if self._kind is not BackendKind.REMOTE or self._closed:
            return False
        task = self._ensure_reconnect_task()
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            # Only the caller's own cancellation propagates as CancelledError
            current = asyncio.current_task()
            cancelling = getattr(current, "cancelling", None)
            if task.cancelled() and self._closed and not (cancelling and cancelling()):
                raise ConnectionLostError("Connection manager has been shut down") from None
            raise

    def _ensure_reconnect_task(self) -> asyncio.Task[bool]:
        # No await between the check and the assignment: one sequence at a time
        task = self._reconnect_task
        if task is None or task.done():
            task = asyncio.create_task(self._reconnect_sequence(), name="portfolio-db-reconnect")
            task.add_done_callback(self._on_reconnect_done)
            self._reconnect_task = task
        return task

    @staticmethod
    def _on_reconnect_done(task: asyncio.Task[bool]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Reconnection sequence failed: {error}")

    async def _reconnect_sequence(self) -> bool:
        logger.warning("Reconnecting to cloud database")
        await self._stop_heartbeat()

        old = self._backend
        if old is not None and old.kind is BackendKind.REMOTE:
            await self._close_quietly(old)

        max_retries = self._config.max_retries
        for attempt in range(max_retries):
            if self._closed:
                return False
            self._retries = attempt + 1
            try:
                backend = await self._open_remote()
            except Exception as e:
                self._last_error = str(e)
                logger.warning(f"Reconnection attempt {attempt + 1}/{max_retries} failed: {e}")
                if attempt < max_retries - 1:
                    await self._sleep(self._config.delay_for(attempt))
                continue

            if self._closed:
                await self._close_quietly(backend)
                return False
            self._install(backend)
            self._last_error = None
            self._start_heartbeat()
            logger.info(f"Reconnected to cloud database on attempt {attempt + 1}")
            return True

        logger.error(
            f"Cloud database unreachable after {max_retries} attempts; "
            "switching to local database for the rest of this process"
        )
        await self._install_local()
        return False

    # -- heartbeat -----------------------------------------------------------

    def _start_heartbeat(self) -> None:
        if self._closed or self._kind is not BackendKind.REMOTE or self.heartbeat_active:
            return
        self._heartbeat_task = asyncio.create_task(
            self._heartbeat_loop(), name="portfolio-db-heartbeat"
        )

    async def _stop_heartbeat(self) -> None:
        task, self._heartbeat_task = self._heartbeat_task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _heartbeat_loop(self) -> None:
        interval = self._config.heartbeat_interval
        while not self._closed:
            await asyncio.sleep(interval)

            backend = self._backend
            if self._closed or backend is None or backend.kind is not BackendKind.REMOTE:
                return
            try:
                await backend.ping()
            except Exception as e:
                self._last_error = str(e)
                logger.warning(f"Cloud database heartbeat failed: {e}")
                # This loop ends here; a successful reconnection starts a new one
                self._heartbeat_task = None
                self._ensure_reconnect_task()
                return
            logger.debug("Cloud database heartbeat ok")

    # -- helpers -------------------------------------------------------------

    async def _open_remote(self) -> DatabaseBackend:
        assert self._remote_url is not None
        backend = self._remote_factory(self._remote_url)
        try:
            await asyncio.wait_for(backend.open(), timeout=self._config.connect_timeout)
        except Exception:
            await self._close_quietly(backend)
            raise
        return backend

    async def _install_local(self) -> None:
        # Local failures are fatal and propagate
        backend = self._local_factory(self._config.local_path)
        await backend.open()
        self._install(backend)

    def _install(self, backend: DatabaseBackend) -> None:
        self._backend = backend
        self._kind = backend.kind
        self._retries = 0

    @staticmethod
    async def _close_quietly(backend: DatabaseBackend) -> None:
        try:
            await backend.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing {backend.kind.value} backend: {e}")


__all__ = ["ConnectionManager", "ManagerConfig"]
