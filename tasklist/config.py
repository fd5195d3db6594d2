"""Settings loaded from environment variables.

One Settings object for the whole app; every value has a usable default, so
nothing is required at import time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TASKLIST"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_level(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_url: Optional[str]
    storage_key: str
    strict_load: bool
    log_level: int
    log_file: Optional[Path]


def get_settings() -> Settings:
    """Reads the environment every call, so tests can monkeypatch it."""
    log_file = os.getenv(_k("LOG_FILE"))
    return Settings(
        data_dir=_env_path(_k("DATA_DIR"), Path("~/.local/share/tasklist").expanduser()),
        db_url=_env(_k("DB_URL")) or None,
        storage_key=_env(_k("STORAGE_KEY"), "tasks"),
        strict_load=_env_bool(_k("STRICT_LOAD"), False),
        log_level=_env_level(_k("LOG_LEVEL"), logging.WARNING),
        log_file=Path(log_file).expanduser() if log_file and log_file.strip() else None,
    )
