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
    """Read a positive integer from the environment."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HomeLedger"
    ENV_PREFIX = "HOMELEDGER_"
    DB_FILENAME = "homeledger.db"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool(self._env("DEV_MODE"), default=True)
        self.DATABASE_URL = os.getenv(self._env("DATABASE_URL"), self._build_sqlite_url())
        self.DUE_HORIZON_DAYS = _env_int(self._env("DUE_HORIZON_DAYS"), 30)
        self.FORECAST_MAX_ITERATIONS = _env_int(self._env("FORECAST_MAX_ITERATIONS"), 100_000)
        self.BALANCE_WRITE_RETRIES = _env_int(self._env("BALANCE_WRITE_RETRIES"), 3)
        self.CATCH_UP_LIMIT = _env_int(self._env("CATCH_UP_LIMIT"), 366)
        self.AUTO_POST = _env_bool(self._env("AUTO_POST"), default=False)
        self.AUTO_POST_MINUTES = _env_int(self._env("AUTO_POST_MINUTES"), 60)

    def _env(self, name: str) -> str:
        return f"{self.ENV_PREFIX}{name}"

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv(self._env("DATA_DIR"), "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True}


class DevConfig(BaseConfig):
    """Development configuration: verbose console logging regardless of environment."""

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = True


class TestingConfig(BaseConfig):
    """Configuration used by the test-suite; never starts background jobs."""

    def __init__(self) -> None:
        super().__init__()
        self.AUTO_POST = False
