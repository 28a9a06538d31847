"""Application settings resolved from the environment (and a local .env)."""

from __future__ import annotations

import logging
import os
from typing import Any, List, Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return str(value)


def _as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        return normalized in {"1", "true", "yes", "on"}
    return default


def _as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (ValueError, TypeError):
        return default


def _as_float_list(value: Any, default: List[float]) -> List[float]:
    if value is None:
        return list(default)
    parts = [part.strip() for part in str(value).split(",") if part.strip()]
    try:
        parsed = [float(part) for part in parts]
    except ValueError:
        logger.warning("Invalid delay list %r, using %s", value, default)
        return list(default)
    return parsed or list(default)


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in str(value).split(",") if item.strip()]


class Settings:
    """Process-wide settings; call :meth:`refresh_from_env` after changing env vars."""

    SQLITECLOUD_CONNECTION_STRING: Optional[str] = None

    PORTFOLIO_DB_PATH: str = "data/portfolio.db"
    PORTFOLIO_DB_CONNECT_TIMEOUT: float = 10.0
    PORTFOLIO_DB_MAX_RETRIES: int = 3
    PORTFOLIO_DB_RETRY_DELAYS: List[float] = [1.0, 3.0, 5.0]
    PORTFOLIO_DB_HEARTBEAT_INTERVAL: float = 30.0

    PORTFOLIO_API_HOST: str = "0.0.0.0"
    PORTFOLIO_API_PORT: int = 3001
    PORTFOLIO_API_CORS_ORIGINS: List[str] = []
    PORTFOLIO_DEV_MODE: bool = False

    LOG_LEVEL: str = "INFO"

    @classmethod
    def _populate(cls) -> None:
        cls.SQLITECLOUD_CONNECTION_STRING = _as_optional_str(
            os.getenv("SQLITECLOUD_CONNECTION_STRING")
        )

        cls.PORTFOLIO_DB_PATH = _as_str(os.getenv("PORTFOLIO_DB_PATH"), "data/portfolio.db")
        cls.PORTFOLIO_DB_CONNECT_TIMEOUT = _as_float(
            os.getenv("PORTFOLIO_DB_CONNECT_TIMEOUT"), 10.0
        )
        cls.PORTFOLIO_DB_MAX_RETRIES = max(_as_int(os.getenv("PORTFOLIO_DB_MAX_RETRIES"), 3), 1)
        cls.PORTFOLIO_DB_RETRY_DELAYS = _as_float_list(
            os.getenv("PORTFOLIO_DB_RETRY_DELAYS"), [1.0, 3.0, 5.0]
        )
        cls.PORTFOLIO_DB_HEARTBEAT_INTERVAL = _as_float(
            os.getenv("PORTFOLIO_DB_HEARTBEAT_INTERVAL"), 30.0
        )

        cls.PORTFOLIO_API_HOST = _as_str(os.getenv("PORTFOLIO_API_HOST"), "0.0.0.0")
        cls.PORTFOLIO_API_PORT = _as_int(os.getenv("PORTFOLIO_API_PORT"), 3001)
        cls.PORTFOLIO_API_CORS_ORIGINS = _as_list(os.getenv("PORTFOLIO_API_CORS_ORIGINS"))
        cls.PORTFOLIO_DEV_MODE = _as_bool(os.getenv("PORTFOLIO_DEV_MODE"), False)

        cls.LOG_LEVEL = _as_str(os.getenv("LOG_LEVEL"), "INFO").upper()

    @classmethod
    def refresh_from_env(cls) -> None:
        """Re-read every setting from the current environment."""
        cls._populate()


Settings._populate()


def setup_logging(level_override: Optional[str] = None) -> None:
    """Configure root logging using settings or override."""

    level_name = (level_override or Settings.LOG_LEVEL or "INFO").upper()

    if level_name in {"NO", "NONE", "OFF"}:
        # Use a level above CRITICAL to ensure all logging is effectively disabled
        level = logging.CRITICAL + 10
    else:
        level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )

    logging.getLogger("portfolio").setLevel(level)

    # Keep noisy third-party loggers at INFO or higher to avoid chatty output
    noisy_logger_level = max(level, logging.INFO)
    for name in ("uvicorn.access", "sqlitecloud", "aiosqlite"):
        logging.getLogger(name).setLevel(noisy_logger_level)


__all__ = ["Settings", "setup_logging"]
