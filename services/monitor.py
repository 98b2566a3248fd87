"""Per-location fan-out and overall status orchestration for the API."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from app.schemas import LocationStatus, Reading
from datastore.factory import build_default_store
from models.devices import DeviceInfo, known_devices
from models.records import SafetyStatus
from services.readings import ReadingStoreAdapter
from services.status import StatusAggregator
from settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MonitorService:
    """Coordinates the reading adapter, the status aggregator and the device fan-out."""

    def __init__(
        self,
        readings: ReadingStoreAdapter,
        aggregator: StatusAggregator,
        devices: Sequence[DeviceInfo] = (),
        workers: int = 3,
    ) -> None:
        self.readings = readings
        self.aggregator = aggregator
        self.devices = tuple(devices) or known_devices()
        self.executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="device-fanout"
        )

    def collect_per_device(
        self, fetch: Callable[[str], Optional[T]]
    ) -> List[Tuple[DeviceInfo, T]]:
        """Run ``fetch`` for every device concurrently, keeping registry order.

        Devices for which ``fetch`` returns ``None`` are dropped. The first
        exception raised by any device propagates and aborts the collection.
        """
        device_ids = [device.device_id.value for device in self.devices]
        results = self.executor.map(fetch, device_ids)
        return [
            (device, result)
            for device, result in zip(self.devices, results)
            if result is not None
        ]

    def latest_per_location(self) -> List[Reading]:
        latest = self.collect_per_device(self.readings.get_latest)
        data = [
            reading.model_copy(update={"location_name": device.location_name})
            for device, reading in latest
        ]
        logger.info(
            "Collected latest readings",
            extra={"reading_count": len(data), "endpoint": "latest"},
        )
        return data

    def overall_status(self) -> Tuple[Optional[SafetyStatus], List[LocationStatus]]:
        locations = [
            status for _device, status in self.collect_per_device(self.readings.get_latest_status)
        ]
        overall = self.aggregator.aggregate(location.safety_status for location in locations)
        if overall is None:
            logger.warning("No devices reporting a safety status", extra={"endpoint": "status"})
        else:
            logger.info(
                "Computed overall status",
                extra={"overall_status": overall.value, "endpoint": "status"},
            )
        return overall, locations

    def shutdown(self) -> None:
        """Release fan-out threads during application shutdown."""
        self.executor.shutdown(wait=False, cancel_futures=True)


@lru_cache
def build_default_monitor(workers: Optional[int] = None) -> MonitorService:
    """Factory that wires the monitor with the configured reading store."""
    settings = get_settings()
    store = build_default_store()
    return MonitorService(
        readings=ReadingStoreAdapter(store),
        aggregator=StatusAggregator(),
        workers=workers or settings.fanout_workers,
    )
