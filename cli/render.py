from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer

from cli.dashboard import UNAVAILABLE, ChartHandle, Dashboard, format_measurement
from models.devices import location_name_for

_STATUS_COLORS = {
    "safe": typer.colors.GREEN,
    "caution": typer.colors.YELLOW,
    "unsafe": typer.colors.RED,
}


def _status_color(status: Optional[str]) -> Optional[str]:
    return _STATUS_COLORS.get((status or "").lower())


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def echo_status(label: str, status: Optional[str]) -> None:
    typer.echo(f"{label}: ", nl=False)
    typer.secho(status or UNAVAILABLE, fg=_status_color(status), bold=True)


def render_chart(chart: ChartHandle) -> None:
    echo_heading(chart.y_axis_label)
    if not chart.datasets:
        typer.echo("  No historical data.")
        return
    width = max([len(dataset.label) for dataset in chart.datasets] + [8])
    typer.echo(f"  {'':<{width}} " + " ".join(f"{label:>6}" for label in chart.labels))
    for dataset in chart.datasets:
        values = " ".join(f"{format_measurement(value):>6}" for value in dataset.data)
        typer.echo(f"  {dataset.label:<{width}} {values}")


def render_dashboard(dashboard: Dashboard) -> None:
    view = dashboard.view
    typer.echo()
    echo_heading("Rideau Canal Ice Monitor")
    typer.secho(view.overall.text, fg=_status_color(view.overall.status), bold=True)
    typer.echo(f"Last updated: {view.last_updated or '--:--:--'}")
    if view.error:
        typer.secho(view.error, fg=typer.colors.RED, err=True)

    for card in view.cards.values():
        typer.echo()
        echo_status(card.device.location_name, card.badge_text if card.badge_text != "--" else None)
        echo_key_values(
            [
                ("  Ice thickness (cm)", card.ice),
                ("  Surface temperature (°C)", card.temperature),
                ("  Snow accumulation (cm)", card.snow),
            ]
        )

    for chart in dashboard.charts:
        typer.echo()
        render_chart(chart)


def render_latest(payload: Dict[str, Any]) -> None:
    echo_heading("Latest Readings")
    echo_key_values([("timestamp", payload.get("timestamp"))])
    readings = payload.get("data") or []
    if not readings:
        typer.echo("No readings available.")
    for reading in readings:
        typer.echo()
        echo_status(reading.get("locationName") or reading.get("DeviceId"), reading.get("SafetyStatus"))
        echo_key_values(
            [
                ("  window_end_time", reading.get("WindowEndTime")),
                ("  ice_thickness", format_measurement(reading.get("AvgIceThickness"))),
                ("  surface_temp", format_measurement(reading.get("AvgSurfaceTemp"))),
                ("  snow_accumulation", format_measurement(reading.get("MaxSnowAccumulation"))),
            ]
        )


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("System Status")
    echo_status("overall", payload.get("overallStatus"))
    locations = payload.get("locations") or []
    if not locations:
        typer.echo("No devices reporting.")
    for location in locations:
        device_id = location.get("deviceId") or ""
        typer.echo(
            f"  - {location.get('locationName') or location_name_for(device_id)}: "
            f"{location.get('safetyStatus') or UNAVAILABLE} (as of {location.get('windowEndTime')})"
        )


def render_history(payload: Dict[str, Any]) -> None:
    echo_heading(f"History for {payload.get('locationName')} ({payload.get('deviceId')})")
    readings = payload.get("data") or []
    if not readings:
        typer.echo("No readings available.")
        return
    for reading in readings:
        typer.echo(
            f"  {reading.get('WindowEndTime')}  "
            f"ice={format_measurement(reading.get('AvgIceThickness'))}  "
            f"temp={format_measurement(reading.get('AvgSurfaceTemp'))}  "
            f"snow={format_measurement(reading.get('MaxSnowAccumulation'))}  "
            f"{reading.get('SafetyStatus') or UNAVAILABLE}"
        )
