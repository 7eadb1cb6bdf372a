from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from cli.client import HistoryClient, HistoryUnavailable
from cli.config import CLIConfig, load_config
from cli.render import render_dashboard, render_devices, render_diagnostic
from logging_config import configure_logging
from services.dashboard import build_default_dashboard, list_devices
from services.diagnostics import connection_failure
from services.readings import readings_from_payloads

_NOW_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


@dataclass
class CLIState:
    config: CLIConfig
    client: HistoryClient


app = typer.Typer(
    help="Compliance and diagnostics for valve telemetry history.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _fetch_or_exit(state: CLIState) -> list:
    try:
        return state.client.fetch_history()
    except HistoryUnavailable as exc:
        typer.secho(f"CONNECTION FAILURE: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Telemetry server base URL (defaults to HISTORY_BASE_URL env or http://localhost:8000).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between history refreshes in watch mode.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Per-request timeout in seconds.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override the LOG_LEVEL environment setting.",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level.upper() if log_level else None)
    config = load_config(
        base_url=base_url,
        poll_interval=poll_interval,
        request_timeout=timeout,
    )
    client = HistoryClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("devices")
def devices_command(ctx: typer.Context) -> None:
    """List devices present in the remote history."""
    state = _get_state(ctx)
    readings = readings_from_payloads(_fetch_or_exit(state))
    render_devices(list_devices(readings))


@app.command("status")
def status_command(
    ctx: typer.Context,
    device: Optional[str] = typer.Option(None, "--device", "-d", help="Device to display."),
) -> None:
    """Fetch the history once and show the device dashboard."""
    state = _get_state(ctx)
    readings = readings_from_payloads(_fetch_or_exit(state))
    render_dashboard(build_default_dashboard().build(readings, device_id=device))


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    device: Optional[str] = typer.Option(None, "--device", "-d", help="Device to display."),
    count: int = typer.Option(
        0,
        "--count",
        "-n",
        min=0,
        help="Stop after this many refreshes (0 polls until interrupted).",
    ),
) -> None:
    """Poll the history and redraw the dashboard on every refresh."""
    state = _get_state(ctx)
    service = build_default_dashboard()
    current_device = device
    refreshes = 0
    while True:
        try:
            payloads = state.client.fetch_history()
        except HistoryUnavailable as exc:
            render_diagnostic(connection_failure(str(exc)))
        else:
            readings = readings_from_payloads(payloads)
            if readings:
                view = service.build(readings, device_id=current_device)
                current_device = view.device_id
                render_dashboard(view)
        refreshes += 1
        if count and refreshes >= count:
            return
        typer.echo()
        time.sleep(state.config.poll_interval)


@app.command("analyze")
def analyze_command(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON file with a list of readings."
    ),
    device: Optional[str] = typer.Option(None, "--device", "-d", help="Device to display."),
    now: Optional[datetime] = typer.Option(
        None,
        "--now",
        formats=_NOW_FORMATS,
        help="Reference instant (UTC) used for today's compliance card.",
    ),
) -> None:
    """Show the dashboard for a local history export."""
    try:
        payloads = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{file} is not valid JSON: {exc}") from exc
    if not isinstance(payloads, list):
        raise typer.BadParameter(f"{file} must contain a JSON list of readings.")
    readings = readings_from_payloads(payloads)
    render_dashboard(build_default_dashboard().build(readings, device_id=device, now=now))
