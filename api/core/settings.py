"""
Process configuration read from environment variables.

Values are parsed once into a frozen `Settings` object. Bad numbers fall back
to defaults instead of failing the process at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

SSL_MODES = ("disable", "prefer", "require", "verify-ca", "verify-full")
DEFAULT_SSL_MODE = "verify-full"

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _ssl_mode() -> str:
    mode = os.environ.get("DB_SSL_MODE", "").strip().lower()
    # Unknown values must not silently turn verification off.
    return mode if mode in SSL_MODES else DEFAULT_SSL_MODE


@dataclass(frozen=True)
class Settings:
    database_url: str = ""
    pool_min_size: int = 1
    pool_max_size: int = 5
    acquire_timeout: float = 10.0
    command_timeout: float = 30.0
    ssl_mode: str = DEFAULT_SSL_MODE
    create_tables_on_startup: bool = True
    cors_allow_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    log_level: str = "INFO"


def load_settings() -> Settings:
    min_size = max(0, _env_int("DB_POOL_MIN_SIZE", 1))
    max_size = max(1, min_size, _env_int("DB_POOL_MAX_SIZE", 5))
    return Settings(
        database_url=os.environ.get("DATABASE_URL", "").strip(),
        pool_min_size=min_size,
        pool_max_size=max_size,
        acquire_timeout=_env_float("DB_ACQUIRE_TIMEOUT", 10.0),
        command_timeout=_env_float("DB_COMMAND_TIMEOUT", 30.0),
        ssl_mode=_ssl_mode(),
        create_tables_on_startup=_env_bool("DB_CREATE_TABLES", True),
        cors_allow_origins=_env_list("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )
