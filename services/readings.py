"""Typed, read-only access to per-device readings."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from pydantic import ValidationError

from app.schemas import LocationStatus, Reading
from datastore.base import Document, ReadingStore, ReadingStoreError
from models.devices import location_name_for
from models.records import parse_window_end_time
from settings import DEFAULT_HISTORY_LIMIT

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"\s*[+-]?\d+")


def parse_limit(raw: object, default: int = DEFAULT_HISTORY_LIMIT) -> int:
    """Parse the leading integer of ``raw`` (``"5abc"`` and ``"2.5"`` give 5 and 2).

    Falls back to ``default`` when there is no leading integer or it is not positive.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        candidate = raw
    else:
        match = _LEADING_INT_RE.match(str(raw))
        if match is None:
            return default
        candidate = int(match.group(0))
    return candidate if candidate > 0 else default


class ReadingStoreAdapter:
    """Validates store documents into API models; never writes."""

    def __init__(self, store: ReadingStore) -> None:
        self.store = store

    def get_latest(self, device_id: str) -> Optional[Reading]:
        document = self.store.latest(device_id)
        if document is None:
            return None
        return self._to_reading(document)

    def get_history(self, device_id: str, limit: object = None) -> List[Reading]:
        """Return up to ``limit`` most recent readings, oldest first."""
        count = parse_limit(limit)
        documents = self.store.recent(device_id, count)
        readings = [self._to_reading(document) for document in documents]
        readings.sort(key=lambda reading: reading.window_end_time)
        logger.debug(
            "Fetched history",
            extra={"device_id": device_id, "limit": count, "reading_count": len(readings)},
        )
        return readings

    def get_latest_status(self, device_id: str) -> Optional[LocationStatus]:
        document = self.store.latest_status(device_id)
        if document is None:
            return None
        try:
            return LocationStatus(
                device_id=document.get("DeviceId", device_id),
                safety_status=document.get("SafetyStatus"),
                window_end_time=parse_window_end_time(document["WindowEndTime"]),
                location_name=location_name_for(device_id),
            )
        except (KeyError, TypeError, ValueError) as exc:
            # pydantic's ValidationError is a ValueError subclass.
            raise ReadingStoreError(
                f"Malformed status projection for device {device_id!r}: {exc}"
            ) from exc

    def get_all(self) -> List[Document]:
        """Return the raw stored documents, including fields outside ``Reading``."""
        return self.store.all()

    @staticmethod
    def _to_reading(document: Document) -> Reading:
        try:
            return Reading.model_validate(document)
        except ValidationError as exc:
            raise ReadingStoreError(f"Malformed reading document: {exc}") from exc
