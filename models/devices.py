"""Static registry of the monitored canal locations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class DeviceId(str, Enum):
    """Sensor devices reporting into the reading store."""

    fifth = "fifthDevice"
    dows = "dowDevice"
    nac = "nacDevice"


@dataclass(frozen=True)
class DeviceInfo:
    device_id: DeviceId
    location_name: str
    color: str
    key: str


DEVICE_REGISTRY: Mapping[DeviceId, DeviceInfo] = MappingProxyType(
    {
        DeviceId.fifth: DeviceInfo(
            device_id=DeviceId.fifth,
            location_name="Fifth Avenue",
            color="rgb(255, 99, 132)",
            key="fifth",
        ),
        DeviceId.dows: DeviceInfo(
            device_id=DeviceId.dows,
            location_name="Dow's Lake",
            color="rgb(75, 192, 192)",
            key="dows",
        ),
        DeviceId.nac: DeviceInfo(
            device_id=DeviceId.nac,
            location_name="NAC",
            color="rgb(54, 162, 235)",
            key="nac",
        ),
    }
)


def known_devices() -> tuple[DeviceInfo, ...]:
    """Registry entries in display order."""
    return tuple(DEVICE_REGISTRY.values())


def lookup_device(device_id: str) -> Optional[DeviceInfo]:
    try:
        return DEVICE_REGISTRY[DeviceId(device_id)]
    except ValueError:
        return None


def location_name_for(device_id: str) -> str:
    """Return the display name for ``device_id``, falling back to the raw id."""
    info = lookup_device(device_id)
    return info.location_name if info else device_id
