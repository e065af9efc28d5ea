"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "FLOW"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path

    # ---- Scheduled notification storage ----
    storage_backend: str
    storage_path: Path
    storage_key: str
    max_scheduled: int

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "flow").strip() or "flow"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/flow"))

        storage_backend = _env(_k("STORAGE_BACKEND"), "sqlite").strip().lower() or "sqlite"
        default_storage_path = data_dir / ("kv" if storage_backend == "json" else "notifications.sqlite3")
        storage_path = _env_path(_k("STORAGE_PATH"), default_storage_path)
        storage_key = _env(_k("STORAGE_KEY"), "flow_scheduled_notifications_v1").strip()
        max_scheduled = _env_int(_k("MAX_SCHEDULED"), 50)
        if max_scheduled < 1:
            max_scheduled = 50

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            storage_backend=storage_backend,
            storage_path=storage_path,
            storage_key=storage_key or "flow_scheduled_notifications_v1",
            max_scheduled=max_scheduled,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
