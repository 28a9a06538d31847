"""CLI commands for inspecting and populating the databases."""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

from ..config.settings import Settings
from ..db.base import DatabaseBackend
from ..db.cloud import SQLiteCloudBackend
from ..db.manager import ConnectionManager, ManagerConfig
from ..db.schema import ensure_schema
from ..db.sqlite import SQLiteBackend
from ..db.transfer import seed_sample_data, transfer_tables

logger = logging.getLogger(__name__)

CONNECTION_STRING_FORMAT = "sqlitecloud://host.sqlite.cloud:8860/database?apikey=..."


def _require_cloud_url() -> str | None:
    url = Settings.SQLITECLOUD_CONNECTION_STRING
    if not url:
        print("❌ SQLITECLOUD_CONNECTION_STRING is not set", file=sys.stderr)
        print(f"Format: {CONNECTION_STRING_FORMAT}", file=sys.stderr)
    return url


async def _close(backend: Optional[DatabaseBackend]) -> None:
    if backend is not None:
        await backend.close()


async def show_status() -> int:
    """Start a manager the way the API does, print its health snapshot, stop it."""
    manager = ConnectionManager(ManagerConfig.from_settings())
    try:
        await manager.initialize(Settings.SQLITECLOUD_CONNECTION_STRING)
        snapshot = await manager.get_health_snapshot()
    except Exception as exc:
        print(f"❌ Database status check failed: {exc}", file=sys.stderr)
        logger.exception("Status check failed")
        return 1
    finally:
        await manager.shutdown()

    print(json.dumps(snapshot.to_dict(), indent=2))
    return 0 if snapshot.healthy else 1


async def create_schema(remote: bool = False) -> int:
    """Create missing tables on the local database, or on the cloud one."""
    url = None
    if remote:
        url = _require_cloud_url()
        if not url:
            return 1

    backend: Optional[DatabaseBackend] = None
    try:
        if url:
            backend = SQLiteCloudBackend(url)
        else:
            backend = SQLiteBackend(Settings.PORTFOLIO_DB_PATH, bootstrap_schema=False)
        await backend.open()
        await ensure_schema(backend)
    except Exception as exc:
        print(f"❌ Schema creation failed: {exc}", file=sys.stderr)
        logger.exception("Schema creation failed")
        return 1
    finally:
        await _close(backend)

    print(f"✅ Schema ready on {backend.kind.value} database")
    return 0


async def migrate_to_cloud() -> int:
    """Copy every portfolio table from the local file to SQLite Cloud."""
    url = _require_cloud_url()
    if not url:
        return 1

    local: Optional[DatabaseBackend] = None
    cloud: Optional[DatabaseBackend] = None
    try:
        local = SQLiteBackend(Settings.PORTFOLIO_DB_PATH)
        cloud = SQLiteCloudBackend(url)
        await local.open()
        await cloud.open()
        print("🚀 Migrating local SQLite data to SQLite Cloud...\n")
        results = await transfer_tables(local, cloud)
    except Exception as exc:
        print(f"❌ Migration failed: {exc}", file=sys.stderr)
        logger.exception("Migration failed")
        return 1
    finally:
        await _close(local)
        await _close(cloud)

    print("📋 Migration Summary:")
    for result in results:
        if result.error:
            print(f"  ❌ {result.table}: {result.error}")
            continue
        marker = "✅" if result.ok else "⚠️ "
        print(
            f"  {marker} {result.table}: {result.copied}/{result.source_rows} copied, "
            f"{result.target_rows} in cloud"
        )
    return 0 if all(r.ok for r in results) else 1


async def seed_database(local: bool = False) -> int:
    """Insert sample profile, projects and skills."""
    url = None
    if not local:
        url = _require_cloud_url()
        if not url:
            return 1

    backend: Optional[DatabaseBackend] = None
    try:
        backend = SQLiteCloudBackend(url) if url else SQLiteBackend(Settings.PORTFOLIO_DB_PATH)
        await backend.open()
        written = await seed_sample_data(backend)
    except Exception as exc:
        print(f"❌ Seeding failed: {exc}", file=sys.stderr)
        logger.exception("Seeding failed")
        return 1
    finally:
        await _close(backend)

    print(f"✅ Added {written} sample rows to the {backend.kind.value} database")
    return 0
