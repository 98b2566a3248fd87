"""Polling dashboard: refresh cycle, card view model and chart handles."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from cli.client import ApiClient
from models.devices import DeviceId, DeviceInfo, known_devices, lookup_device
from models.records import parse_window_end_time

logger = logging.getLogger(__name__)

UNAVAILABLE = "N/A"
ERROR_MESSAGE = "Failed to fetch latest data. Retrying..."


class CycleState(str, Enum):
    idle = "idle"
    fetching = "fetching"
    rendering = "rendering"
    error = "error"


def format_measurement(value: Any) -> str:
    """Render a measurement to one decimal place, or ``N/A`` when absent."""
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return UNAVAILABLE
    return f"{value:.1f}"


def format_clock(moment: datetime, with_seconds: bool = True) -> str:
    return moment.astimezone().strftime("%H:%M:%S" if with_seconds else "%H:%M")


def _chart_label(window_end_time: Any) -> str:
    try:
        return format_clock(parse_window_end_time(window_end_time), with_seconds=False)
    except (AttributeError, TypeError, ValueError):
        return str(window_end_time)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass
class LocationCard:
    device: DeviceInfo
    ice: str = UNAVAILABLE
    temperature: str = UNAVAILABLE
    snow: str = UNAVAILABLE
    badge_text: str = "--"
    badge_class: str = "safety-badge"


@dataclass
class OverallBadge:
    status: Optional[str] = None
    text: str = "Canal Status: Loading..."
    css_class: str = "status-badge"


@dataclass
class DashboardView:
    cards: Dict[DeviceId, LocationCard]
    overall: OverallBadge = field(default_factory=OverallBadge)
    last_updated: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def create(cls, devices: Sequence[DeviceInfo] = ()) -> "DashboardView":
        entries = tuple(devices) or known_devices()
        return cls(cards={device.device_id: LocationCard(device=device) for device in entries})


@dataclass
class ChartDataset:
    label: str
    color: str
    data: List[Optional[float]]


@dataclass
class ChartHandle:
    """A line chart that is created once and updated in place every cycle."""

    title: str
    y_axis_label: str
    measurement: str
    labels: List[str] = field(default_factory=list)
    datasets: List[ChartDataset] = field(default_factory=list)
    revision: int = 0

    def update(self, labels: Sequence[str], datasets: Sequence[ChartDataset]) -> None:
        self.labels = list(labels)
        self.datasets = list(datasets)
        self.revision += 1


@dataclass
class DashboardCharts:
    ice: ChartHandle
    temperature: ChartHandle

    @classmethod
    def create(cls) -> "DashboardCharts":
        return cls(
            ice=ChartHandle("Ice Thickness", "Ice Thickness (cm)", "AvgIceThickness"),
            temperature=ChartHandle(
                "Surface Temperature", "Surface Temperature (°C)", "AvgSurfaceTemp"
            ),
        )

    def __iter__(self) -> Iterator[ChartHandle]:
        return iter((self.ice, self.temperature))


@dataclass
class DeviceHistory:
    device: DeviceInfo
    readings: List[Dict[str, Any]]


def update_location_cards(view: DashboardView, readings: Iterable[Dict[str, Any]]) -> None:
    for reading in readings:
        raw_id = str(reading.get("DeviceId"))
        device = lookup_device(raw_id)
        card = view.cards.get(device.device_id) if device else None
        if card is None:
            logger.warning("Skipping reading for unknown device", extra={"device_id": raw_id})
            continue

        card.ice = format_measurement(reading.get("AvgIceThickness"))
        card.temperature = format_measurement(reading.get("AvgSurfaceTemp"))
        card.snow = format_measurement(reading.get("MaxSnowAccumulation"))

        status = reading.get("SafetyStatus")
        if status:
            card.badge_text = status
            card.badge_class = f"safety-badge {status.lower()}"


def update_overall_status(view: DashboardView, status: Optional[str]) -> None:
    if status:
        view.overall = OverallBadge(
            status=status,
            text=f"Canal Status: {status}",
            css_class=f"status-badge {status.lower()}",
        )
    else:
        view.overall = OverallBadge(text="Canal Status: No data")


def update_charts(charts: DashboardCharts, histories: Sequence[DeviceHistory]) -> bool:
    """Replace chart labels and series in place; returns ``False`` when nothing was updated."""
    with_data = [history for history in histories if history.readings]
    if not with_data:
        logger.warning("No historical data available for charts")
        return False

    labels = [_chart_label(reading.get("WindowEndTime")) for reading in with_data[0].readings]
    for chart in charts:
        chart.update(
            labels,
            [
                ChartDataset(
                    label=history.device.location_name,
                    color=history.device.color,
                    data=[_as_number(reading.get(chart.measurement)) for reading in history.readings],
                )
                for history in with_data
            ],
        )
    return True


class Dashboard:
    """Owns the view model and chart handles across refresh cycles."""

    def __init__(
        self,
        client: ApiClient,
        history_limit: int,
        view: Optional[DashboardView] = None,
        charts: Optional[DashboardCharts] = None,
        renderer: Optional[Callable[["Dashboard"], None]] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.client = client
        self.history_limit = history_limit
        self.view = view or DashboardView.create()
        self.charts = charts or DashboardCharts.create()
        self.renderer = renderer
        self.state = CycleState.idle
        self._clock = clock

    @property
    def devices(self) -> List[DeviceInfo]:
        return [card.device for card in self.view.cards.values()]

    async def refresh(self) -> bool:
        """Run one fetch/render cycle. Failures are logged and shown, never raised."""
        try:
            self._enter(CycleState.fetching)
            latest = await self.client.get_latest()
            if latest.get("success"):
                update_location_cards(self.view, latest.get("data") or [])
                self.view.last_updated = format_clock(self._clock())

            status = await self.client.get_status()
            if status.get("success"):
                update_overall_status(self.view, status.get("overallStatus"))

            histories = await self._fetch_histories()

            self._enter(CycleState.rendering)
            update_charts(self.charts, histories)
            self.view.error = None
            self._render()
            return True
        except Exception:
            logger.exception("Error updating dashboard", extra={"state": self.state.value})
            self._enter(CycleState.error)
            self.view.error = ERROR_MESSAGE
            self._render()
            return False
        finally:
            self._enter(CycleState.idle)

    async def _fetch_histories(self) -> List[DeviceHistory]:
        devices = self.devices
        payloads = await asyncio.gather(
            *(self.client.get_history(device.device_id.value, self.history_limit) for device in devices)
        )
        return [
            DeviceHistory(device=device, readings=list(payload.get("data") or []))
            for device, payload in zip(devices, payloads)
        ]

    def _enter(self, state: CycleState) -> None:
        self.state = state
        logger.debug("Dashboard cycle state changed", extra={"state": state.value})

    def _render(self) -> None:
        if self.renderer is not None:
            self.renderer(self)


async def run_forever(
    dashboard: Dashboard,
    interval: float,
    cycles: Optional[int] = None,
) -> None:
    """Refresh once immediately, then on every tick of ``interval`` seconds.

    Each tick starts a new cycle without waiting for earlier ones, so a slow
    cycle may overlap the next. ``cycles`` bounds the number of ticks.
    """
    pending: set[asyncio.Task[bool]] = set()
    started = 0
    while cycles is None or started < cycles:
        task = asyncio.create_task(dashboard.refresh())
        pending.add(task)
        task.add_done_callback(pending.discard)
        started += 1
        if cycles is not None and started >= cycles:
            break
        await asyncio.sleep(interval)
    if pending:
        await asyncio.gather(*pending)
