from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional

import pytest

from datastore.base import Document, ReadingStoreError
from datastore.memory import InMemoryReadingStore
from services.monitor import MonitorService
from services.readings import ReadingStoreAdapter
from services.status import StatusAggregator

BASE_TIME = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_document(
    device_id: str,
    minutes: int = 0,
    status: Optional[str] = "Safe",
    **overrides: Any,
) -> Document:
    """Build a stored reading ``minutes`` after ``BASE_TIME``."""
    document: Dict[str, Any] = {
        "id": f"{device_id}-{minutes}",
        "DeviceId": device_id,
        "WindowEndTime": (BASE_TIME + timedelta(minutes=minutes)).isoformat().replace("+00:00", "Z"),
        "AvgIceThickness": 30.0 + minutes / 10,
        "AvgSurfaceTemp": -5.0,
        "MaxSnowAccumulation": 3.0,
        "SafetyStatus": status,
    }
    document.update(overrides)
    return document


class FlakyStore(InMemoryReadingStore):
    """In-memory store whose queries can be switched to fail."""

    def __init__(self, documents: Iterable[Document] = (), failing_device: Optional[str] = None) -> None:
        super().__init__(documents)
        self.failing = True
        self.failing_device = failing_device

    def _check(self, device_id: Optional[str]) -> None:
        if not self.failing:
            return
        if self.failing_device is None or self.failing_device == device_id:
            raise ReadingStoreError("store unreachable")

    def latest(self, device_id: str) -> Optional[Document]:
        self._check(device_id)
        return super().latest(device_id)

    def recent(self, device_id: str, limit: int) -> List[Document]:
        self._check(device_id)
        return super().recent(device_id, limit)

    def latest_status(self, device_id: str) -> Optional[Document]:
        self._check(device_id)
        return super().latest_status(device_id)

    def all(self) -> List[Document]:
        self._check(None)
        return super().all()


def build_monitor(store: InMemoryReadingStore) -> MonitorService:
    return MonitorService(
        readings=ReadingStoreAdapter(store),
        aggregator=StatusAggregator(),
        workers=3,
    )


@pytest.fixture
def store() -> InMemoryReadingStore:
    return InMemoryReadingStore()


@pytest.fixture
def monitor(store: InMemoryReadingStore) -> Iterator[MonitorService]:
    service = build_monitor(store)
    yield service
    service.shutdown()
