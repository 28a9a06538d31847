from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from portfolio.api import create_app
from portfolio.api.middleware import RequestIDLogFilter
from portfolio.db.base import BackendKind
from portfolio.db.manager import ConnectionManager, ManagerConfig


def _create_app(tmp_path, manager=None):
    manager = manager or ConnectionManager(ManagerConfig(local_path=str(tmp_path / "api.db")))
    return create_app({"docs_url": None, "redoc_url": None}, manager=manager)


@pytest.fixture
def client(tmp_path):
    with TestClient(_create_app(tmp_path)) as client:
        yield client


def _broken_manager(error: Exception) -> MagicMock:
    manager = MagicMock(spec=ConnectionManager)
    manager.backend_kind = BackendKind.LOCAL
    manager.initialize = AsyncMock()
    manager.shutdown = AsyncMock()
    manager.execute_read_one = AsyncMock(side_effect=error)
    manager.get_health_snapshot = AsyncMock(side_effect=error)
    return manager


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert "timestamp" in body
    assert "version" in body


def test_dashboard_stats_on_empty_database(client):
    response = client.get("/api/admin/dashboard/stats")
    assert response.status_code == 200
    assert response.json() == {
        "projects": 0,
        "skills": 0,
        "experience": 0,
        "testimonials": 0,
        "featuredProjects": 0,
    }


def test_dashboard_stats_counts_featured_projects(client):
    db = client.app.state.db
    for title, featured in (("One", True), ("Two", False), ("Three", True)):
        client.portal.call(
            db.execute_write,
            "INSERT INTO projects (title, description, technologies, featured) VALUES (?, ?, ?, ?)",
            (title, "desc", "Python", featured),
        )

    stats = client.get("/api/admin/dashboard/stats").json()
    assert stats["projects"] == 3
    assert stats["featuredProjects"] == 2


def test_connection_status_reports_local_backend(client):
    response = client.get("/api/admin/dashboard/connection-status")
    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "local"
    assert body["isConnected"] is True
    assert body["isHealthy"] is True
    assert body["hasHeartbeat"] is False
    assert body["lastError"] is None


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_request_id_is_generated(client):
    response = client.get("/health")
    assert response.headers["X-Request-ID"]


def test_dashboard_errors_become_json(tmp_path):
    app = _create_app(tmp_path, manager=_broken_manager(RuntimeError("boom")))
    with TestClient(app) as client:
        stats = client.get("/api/admin/dashboard/stats")
        assert stats.status_code == 500
        assert stats.json() == {"error": "boom"}

        status = client.get("/api/admin/dashboard/connection-status")
        assert status.status_code == 500
        body = status.json()
        assert body["error"] == "boom"
        assert body["type"] == "unknown"
        assert body["isConnected"] is False
        assert body["isHealthy"] is False


def test_unhandled_errors_hide_details_outside_dev_mode(tmp_path):
    app = _create_app(tmp_path)

    @app.get("/explode")
    async def explode():
        raise RuntimeError("secret detail")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/explode")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Something went wrong!",
        "message": "Internal server error",
    }


def test_unhandled_errors_show_details_in_dev_mode(tmp_path, monkeypatch):
    monkeypatch.setenv("PORTFOLIO_DEV_MODE", "true")
    app = _create_app(tmp_path)

    @app.get("/explode")
    async def explode():
        raise RuntimeError("secret detail")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/explode")

    assert response.json()["message"] == "secret detail"


def test_manager_is_shut_down_with_the_app(tmp_path):
    manager = ConnectionManager(ManagerConfig(local_path=str(tmp_path / "api.db")))
    with TestClient(_create_app(tmp_path, manager=manager)):
        assert manager.is_connected
    assert manager.is_connected is False


def test_log_filter_tags_records_outside_requests():
    record = logging.LogRecord("portfolio", logging.INFO, __file__, 1, "msg", None, None)
    assert RequestIDLogFilter().filter(record) is True
    assert record.request_id == "-"
