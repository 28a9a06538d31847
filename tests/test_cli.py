import json
from unittest.mock import AsyncMock, patch

import pytest

from portfolio.cli import build_parser, main
from portfolio.config.settings import Settings
from portfolio.db.sqlite import SQLiteBackend


class TestParser:
    def test_serve_options(self):
        args = build_parser().parse_args(["serve", "--port", "8000", "--reload"])
        assert args.command == "serve"
        assert args.port == 8000
        assert args.reload is True
        assert args.host is None

    def test_seed_defaults_to_cloud(self):
        args = build_parser().parse_args(["seed"])
        assert args.local is False


@pytest.mark.asyncio
async def test_no_command_prints_help(capsys):
    assert await main([]) == 1
    assert "usage" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_status_reports_local_database(capsys):
    assert await main(["--log-level", "ERROR", "status"]) == 0

    snapshot = json.loads(capsys.readouterr().out)
    assert snapshot["type"] == "local"
    assert snapshot["isHealthy"] is True


@pytest.mark.asyncio
async def test_seed_local_then_count(capsys):
    assert await main(["--log-level", "ERROR", "seed", "--local"]) == 0
    assert "Added 8 sample rows" in capsys.readouterr().out

    backend = SQLiteBackend(Settings.PORTFOLIO_DB_PATH)
    await backend.open()
    try:
        row = await backend.fetch_one("SELECT COUNT(*) AS count FROM skills")
        assert row["count"] == 5
    finally:
        await backend.close()


@pytest.mark.asyncio
async def test_schema_local(capsys):
    assert await main(["--log-level", "ERROR", "schema"]) == 0
    assert "local" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_cloud_commands_need_connection_string(capsys):
    assert await main(["--log-level", "ERROR", "migrate"]) == 1
    assert await main(["--log-level", "ERROR", "seed"]) == 1
    assert await main(["--log-level", "ERROR", "schema", "--remote"]) == 1
    assert "SQLITECLOUD_CONNECTION_STRING is not set" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_serve_uses_settings_defaults():
    with patch("portfolio.commands.api.run_api_server", new_callable=AsyncMock) as run:
        run.return_value = 0
        assert await main(["--log-level", "ERROR", "serve"]) == 0

    run.assert_awaited_once_with(host="0.0.0.0", port=3001, reload=False, log_level="error")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("argv", "message"),
    [
        (["seed"], "Seeding failed"),
        (["migrate"], "Migration failed"),
        (["schema", "--remote"], "Schema creation failed"),
    ],
)
async def test_missing_cloud_driver_is_reported_by_the_command(
    monkeypatch, capsys, cloud_url, argv, message
):
    monkeypatch.setenv("SQLITECLOUD_CONNECTION_STRING", cloud_url)
    Settings.refresh_from_env()
    missing = RuntimeError("sqlitecloud is required for the cloud database.")

    with patch("portfolio.commands.database.SQLiteCloudBackend", side_effect=missing):
        assert await main(["--log-level", "ERROR", *argv]) == 1

    err = capsys.readouterr().err
    assert f"❌ {message}: sqlitecloud is required" in err
