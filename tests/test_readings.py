"""Unit tests for the typed reading adapter."""

from __future__ import annotations

import pytest

from conftest import make_document
from datastore.base import ReadingStoreError
from datastore.memory import InMemoryReadingStore
from models.records import SafetyStatus
from services.readings import ReadingStoreAdapter, parse_limit
from settings import DEFAULT_HISTORY_LIMIT


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, DEFAULT_HISTORY_LIMIT),
        ("5", 5),
        (" 7 ", 7),
        (3, 3),
        ("abc", DEFAULT_HISTORY_LIMIT),
        ("", DEFAULT_HISTORY_LIMIT),
        ("0", DEFAULT_HISTORY_LIMIT),
        ("-4", DEFAULT_HISTORY_LIMIT),
        ("2.5", 2),
        ("5abc", 5),
        ("x5", DEFAULT_HISTORY_LIMIT),
        (True, DEFAULT_HISTORY_LIMIT),
    ],
)
def test_parse_limit(raw, expected) -> None:
    assert parse_limit(raw) == expected


def test_history_returns_most_recent_oldest_first() -> None:
    store = InMemoryReadingStore(make_document("nacDevice", minute * 5) for minute in range(20))
    adapter = ReadingStoreAdapter(store)

    history = adapter.get_history("nacDevice", "5")

    assert [reading.window_end_time.minute for reading in history] == [15, 20, 25, 30, 35]
    assert history == sorted(history, key=lambda reading: reading.window_end_time)


def test_history_defaults_to_twelve_readings() -> None:
    store = InMemoryReadingStore(make_document("dowDevice", minute) for minute in range(30))

    assert len(ReadingStoreAdapter(store).get_history("dowDevice")) == 12


def test_history_for_unknown_device_is_empty() -> None:
    store = InMemoryReadingStore([make_document("nacDevice", 0)])

    assert ReadingStoreAdapter(store).get_history("canalBoat") == []


def test_latest_keeps_absent_measurements_absent() -> None:
    store = InMemoryReadingStore(
        [make_document("fifthDevice", 0, AvgIceThickness=None, MaxSnowAccumulation=None)]
    )

    reading = ReadingStoreAdapter(store).get_latest("fifthDevice")

    assert reading is not None
    assert reading.avg_ice_thickness is None
    assert reading.max_snow_accumulation is None
    assert reading.avg_surface_temp == -5.0
    assert reading.safety_status is SafetyStatus.safe


def test_latest_parses_seven_digit_fractions() -> None:
    store = InMemoryReadingStore(
        [make_document("nacDevice", 0, WindowEndTime="2025-01-15T15:00:00.1234567Z")]
    )

    reading = ReadingStoreAdapter(store).get_latest("nacDevice")

    assert reading is not None
    assert reading.window_end_time.microsecond == 123456
    assert reading.window_end_time.utcoffset().total_seconds() == 0


def test_latest_status_projection_includes_location_name() -> None:
    store = InMemoryReadingStore([make_document("dowDevice", 3, status="Unsafe")])

    status = ReadingStoreAdapter(store).get_latest_status("dowDevice")

    assert status is not None
    assert status.device_id == "dowDevice"
    assert status.safety_status is SafetyStatus.unsafe
    assert status.location_name == "Dow's Lake"


def test_unknown_safety_label_is_a_store_error() -> None:
    store = InMemoryReadingStore([make_document("nacDevice", 0, status="Thin")])
    adapter = ReadingStoreAdapter(store)

    with pytest.raises(ReadingStoreError):
        adapter.get_latest("nacDevice")
    with pytest.raises(ReadingStoreError):
        adapter.get_latest_status("nacDevice")


def test_get_all_returns_raw_documents_without_validation() -> None:
    store = InMemoryReadingStore(
        [
            make_document("nacDevice", 0, PartitionKey="nacDevice"),
            make_document("ghostDevice", 5, status="Thin", WindowEndTime="soon"),
        ]
    )

    documents = ReadingStoreAdapter(store).get_all()

    assert [doc["DeviceId"] for doc in documents] == ["ghostDevice", "nacDevice"]
    assert documents[1]["PartitionKey"] == "nacDevice"
    assert documents[0]["SafetyStatus"] == "Thin"


def test_reading_serialization_omits_unset_location_name() -> None:
    store = InMemoryReadingStore([make_document("nacDevice", 0)])
    reading = ReadingStoreAdapter(store).get_latest("nacDevice")
    assert reading is not None

    assert "locationName" not in reading.model_dump(by_alias=True)
    named = reading.model_copy(update={"location_name": "NAC"})
    assert named.model_dump(by_alias=True)["locationName"] == "NAC"
