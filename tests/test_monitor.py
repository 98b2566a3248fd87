"""Tests for the per-device fan-out and status orchestration."""

from __future__ import annotations

import pytest

from conftest import FlakyStore, build_monitor, make_document
from datastore.base import ReadingStoreError
from models.records import SafetyStatus


def test_latest_per_location_is_in_registry_order_and_skips_silent_devices(store, monitor) -> None:
    store.add(make_document("nacDevice", 1))
    store.add(make_document("fifthDevice", 2))
    store.add(make_document("ghostDevice", 3))

    readings = monitor.latest_per_location()

    assert [reading.device_id for reading in readings] == ["fifthDevice", "nacDevice"]
    assert [reading.location_name for reading in readings] == ["Fifth Avenue", "NAC"]


def test_overall_status_returns_aggregate_and_inputs(store, monitor) -> None:
    store.add(make_document("fifthDevice", 0, status="Safe"))
    store.add(make_document("dowDevice", 0, status="Unsafe"))
    store.add(make_document("nacDevice", 0, status="Caution"))

    overall, locations = monitor.overall_status()

    assert overall is SafetyStatus.unsafe
    assert [location.device_id for location in locations] == ["fifthDevice", "dowDevice", "nacDevice"]


def test_overall_status_uses_latest_reading_only(store, monitor) -> None:
    store.add(make_document("fifthDevice", 0, status="Unsafe"))
    store.add(make_document("fifthDevice", 5, status="Safe"))

    overall, _ = monitor.overall_status()

    assert overall is SafetyStatus.safe


def test_overall_status_without_readings_is_none(monitor) -> None:
    overall, locations = monitor.overall_status()

    assert overall is None
    assert locations == []


def test_single_device_failure_aborts_collection() -> None:
    store = FlakyStore(
        [make_document("fifthDevice", 0), make_document("nacDevice", 0)],
        failing_device="dowDevice",
    )
    monitor = build_monitor(store)
    try:
        with pytest.raises(ReadingStoreError):
            monitor.latest_per_location()
        with pytest.raises(ReadingStoreError):
            monitor.overall_status()
    finally:
        monitor.shutdown()
