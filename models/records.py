"""Domain models shared across services."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum

# Stream Analytics writes seven fractional digits; datetime accepts at most six.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class SafetyStatus(str, Enum):
    """Closed set of safety labels attached to a reading."""

    safe = "Safe"
    caution = "Caution"
    unsafe = "Unsafe"


def parse_window_end_time(value: str | datetime) -> datetime:
    """Parse a stored ``WindowEndTime`` into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        candidate = value.strip()
        if not candidate:
            raise ValueError("Timestamp is empty.")

        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        candidate = _FRACTION_RE.sub(r"\1", candidate)

        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError as exc:
            raise ValueError(f"Invalid timestamp format: {value!r}") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)
