from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import typer

from cli.client import ApiClient, DashboardFetchError
from cli.config import CLIConfig, load_config
from cli.dashboard import Dashboard, run_forever
from cli.render import render_dashboard, render_history, render_latest, render_status
from logging_config import configure_logging


@dataclass
class CLIState:
    config: CLIConfig


app = typer.Typer(
    help="Terminal dashboard for the canal ice monitor API.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _fetch_once(
    config: CLIConfig, request: Callable[[ApiClient], Awaitable[Dict[str, Any]]]
) -> Dict[str, Any]:
    async def _run() -> Dict[str, Any]:
        async with ApiClient(config) as client:
            return await request(client)

    try:
        payload = asyncio.run(_run())
    except DashboardFetchError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    if not payload.get("success"):
        typer.secho(
            f"Request failed: {payload.get('error') or 'no detail provided.'}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)
    return payload


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Monitor API base URL (defaults to API_BASE_URL env or http://localhost:3000).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level.upper() if log_level else None)
    ctx.obj = CLIState(config=load_config(base_url=base_url))


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Seconds between refresh cycles (defaults to DASHBOARD_REFRESH_INTERVAL or 30).",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        min=1,
        help="Readings per device shown in the charts.",
    ),
    once: bool = typer.Option(False, "--once", help="Run a single refresh cycle and exit."),
) -> None:
    """Poll the API and redraw the dashboard on every cycle."""
    state = _get_state(ctx)
    refresh_interval = interval if interval is not None else state.config.refresh_interval
    history_limit = limit if limit is not None else state.config.history_limit

    async def _run() -> None:
        async with ApiClient(state.config) as client:
            dashboard = Dashboard(client, history_limit, renderer=render_dashboard)
            await run_forever(dashboard, refresh_interval, cycles=1 if once else None)

    typer.echo(f"Watching {state.config.base_url} every {refresh_interval}s (Ctrl+C to stop)...")
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        typer.echo("Stopped.")


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Show the latest reading for every location."""
    state = _get_state(ctx)
    render_latest(_fetch_once(state.config, lambda client: client.get_latest()))


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show the overall canal status and the per-location statuses behind it."""
    state = _get_state(ctx)
    render_status(_fetch_once(state.config, lambda client: client.get_status()))


@app.command("history")
def history_command(
    ctx: typer.Context,
    device_id: str = typer.Argument(..., help="Device identifier, e.g. nacDevice."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Number of readings."),
) -> None:
    """Show recent readings for one device, oldest first."""
    state = _get_state(ctx)
    render_history(
        _fetch_once(state.config, lambda client: client.get_history(device_id, limit))
    )
