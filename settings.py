from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


_COSMOS_ENDPOINT_ENV = "COSMOS_ENDPOINT"
_COSMOS_KEY_ENV = "COSMOS_KEY"
_COSMOS_DATABASE_ENV = "COSMOS_DATABASE"
_COSMOS_CONTAINER_ENV = "COSMOS_CONTAINER"
_STORE_BACKEND_ENV = "READING_STORE_BACKEND"
_FIXTURE_PATH_ENV = "READINGS_FIXTURE_PATH"
_FANOUT_WORKERS_ENV = "FANOUT_WORKERS"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

STORE_BACKENDS = ("cosmos", "memory")

# Shared by the API, the dashboard page and the terminal client.
DEFAULT_HISTORY_LIMIT = 12
DEFAULT_REFRESH_INTERVAL = 30.0


@dataclass(frozen=True)
class Settings:
    cosmos_endpoint: Optional[str]
    cosmos_key: Optional[str]
    cosmos_database: Optional[str]
    cosmos_container: Optional[str]
    store_backend: str
    fixture_path: Optional[str]
    fanout_workers: int
    host: str
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_store_backend(default: str) -> str:
    candidate = _read_str_env(_STORE_BACKEND_ENV, default).lower()
    return candidate if candidate in STORE_BACKENDS else default


def _read_log_level(default: str) -> str:
    return _read_str_env(_LOG_LEVEL_ENV, default).upper()


@lru_cache
def get_settings() -> Settings:
    load_dotenv()
    return Settings(
        cosmos_endpoint=_read_optional_env(_COSMOS_ENDPOINT_ENV),
        cosmos_key=_read_optional_env(_COSMOS_KEY_ENV),
        cosmos_database=_read_optional_env(_COSMOS_DATABASE_ENV),
        cosmos_container=_read_optional_env(_COSMOS_CONTAINER_ENV),
        store_backend=_read_store_backend("cosmos"),
        fixture_path=_read_optional_env(_FIXTURE_PATH_ENV),
        fanout_workers=_read_positive_int(_FANOUT_WORKERS_ENV, 3),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_positive_int(_PORT_ENV, 3000),
        log_level=_read_log_level("INFO"),
    )
