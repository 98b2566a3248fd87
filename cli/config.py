from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from settings import DEFAULT_HISTORY_LIMIT, DEFAULT_REFRESH_INTERVAL

DEFAULT_BASE_URL = "http://localhost:3000"

_BASE_URL_ENV = "API_BASE_URL"
_REFRESH_INTERVAL_ENV = "DASHBOARD_REFRESH_INTERVAL"
_HISTORY_LIMIT_ENV = "DASHBOARD_HISTORY_LIMIT"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    history_limit: int = DEFAULT_HISTORY_LIMIT


def _read_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_config(
    base_url: Optional[str] = None,
    refresh_interval: Optional[float] = None,
    history_limit: Optional[int] = None,
) -> CLIConfig:
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    if refresh_interval is None:
        refresh_interval = _read_float(
            os.getenv(_REFRESH_INTERVAL_ENV), DEFAULT_REFRESH_INTERVAL
        )
    if history_limit is None:
        history_limit = int(
            _read_float(os.getenv(_HISTORY_LIMIT_ENV), DEFAULT_HISTORY_LIMIT)
        )
    return CLIConfig(
        base_url=url.rstrip("/"),
        refresh_interval=refresh_interval,
        history_limit=max(history_limit, 1),
    )
