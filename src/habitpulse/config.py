"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on junk values."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments."""

    DB_FILENAME = "habitpulse.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITPULSE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITPULSE_DATABASE_URL", self._build_sqlite_url())
        self.STREAK_LOOKBACK_DAYS = _env_int("HABITPULSE_STREAK_LOOKBACK_DAYS", 30)
        self.COMPLETION_WINDOW_DAYS = _env_int("HABITPULSE_COMPLETION_WINDOW_DAYS", 30)
        self.HEATMAP_WINDOW_DAYS = _env_int("HABITPULSE_HEATMAP_WINDOW_DAYS", 180)
        self.FIXED_TODAY = os.getenv("HABITPULSE_TODAY") or None
        if self.COMPLETION_WINDOW_DAYS <= 0:
            raise ValueError("HABITPULSE_COMPLETION_WINDOW_DAYS must be positive.")
        if self.HEATMAP_WINDOW_DAYS <= 0:
            raise ValueError("HABITPULSE_HEATMAP_WINDOW_DAYS must be positive.")

    @property
    def streak_lookback(self) -> int | None:
        """Backward walk bound for current streaks; ``None`` means unbounded."""

        return self.STREAK_LOOKBACK_DAYS if self.STREAK_LOOKBACK_DAYS > 0 else None

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITPULSE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}


class TestConfig(BaseConfig):
    """Configuration for the test suite backed by an in-memory database."""

    __test__ = False
    # WAL has no meaning for an in-memory database
    SQLITE_PRAGMAS = {"foreign_keys": "on"}

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = "sqlite://"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        from sqlalchemy.pool import StaticPool

        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
