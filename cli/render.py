from __future__ import annotations

from typing import Any, Iterable

import typer

from models.records import Diagnostic
from services.compliance import ADHERED, PARTIAL
from services.dashboard import DashboardView
from services.diagnostics import LEVEL_CRITICAL, LEVEL_OFFLINE, LEVEL_WARNING

_LEVEL_COLORS = {
    LEVEL_CRITICAL: typer.colors.RED,
    LEVEL_OFFLINE: typer.colors.RED,
    LEVEL_WARNING: typer.colors.YELLOW,
}

_ADHERENCE_TEXT = {
    ADHERED: ("SCHEDULE ADHERED", typer.colors.GREEN),
    PARTIAL: ("PARTIAL ADHERENCE", typer.colors.YELLOW),
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_diagnostic(diagnostic: Diagnostic) -> None:
    color = _LEVEL_COLORS.get(diagnostic.level, typer.colors.CYAN)
    typer.secho(diagnostic.message, fg=color, bold=True)
    if diagnostic.detail:
        typer.echo(f"  {diagnostic.detail}")


def render_devices(devices: Iterable[str]) -> None:
    echo_heading("Devices")
    devices = list(devices)
    if not devices:
        typer.echo("No devices reported.")
        return
    for device_id in devices:
        typer.echo(f"  - {device_id}")


def render_dashboard(view: DashboardView) -> None:
    if view.device_id is None:
        typer.echo("No readings available.")
        return

    echo_heading(f"Device {view.device_id}")
    if view.snapshot:
        echo_key_values(
            [
                ("pressure", f"{view.snapshot.pressure_band} ({view.snapshot.pressure:g})"),
                ("gauge", f"{view.snapshot.gauge_percent:.0f}%"),
                ("turns", view.snapshot.rotation_count),
                ("last_sync", view.snapshot.last_sync),
            ]
        )

    typer.echo()
    echo_heading("Diagnostics")
    if view.diagnostic:
        render_diagnostic(view.diagnostic)

    if view.daily is None:
        return

    card = view.daily.today
    typer.echo()
    echo_heading(f"Compliance ({card.day})")
    text, color = _ADHERENCE_TEXT.get(card.adherence, ("NON-COMPLIANT", typer.colors.RED))
    typer.secho(f"{card.metrics.score}% {text}", fg=color)
    echo_key_values(
        [
            ("start", card.metrics.start_time),
            ("duration", card.metrics.duration),
            ("avg_pressure", card.pressure_band),
        ]
    )

    typer.echo()
    echo_heading("Daily Stats")
    if view.daily.days:
        for row in view.daily.days:
            metrics = row.metrics
            typer.echo(
                f"  {row.day}  start={metrics.start_time}  duration={metrics.duration}"
                f"  score={metrics.score}%  pressure={row.pressure_band}"
            )
    else:
        typer.echo("No daily history.")

    typer.echo()
    echo_heading("Recent Readings")
    for log in view.recent:
        typer.echo(f"  {log.time}  ID:{log.device}  {log.status.upper()}  {log.rotation_count} TRN")
