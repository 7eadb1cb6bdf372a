"""Per-device dashboard view assembled from a telemetry history batch."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Iterable, List, Optional

from models.records import DailyStats, Diagnostic, Reading
from services.compliance import ComplianceEngine, build_default_engine
from services.diagnostics import classify_reading, gauge_percent, pressure_band
from services.timestamps import normalize_for_bucketing, normalize_for_display
from settings import get_settings

logger = logging.getLogger(__name__)

STATUS_PLACEHOLDER = "Unknown"


@dataclass(frozen=True)
class LiveSnapshot:
    rotation_count: int
    pressure: float
    pressure_band: str
    gauge_percent: float
    last_sync: str


@dataclass(frozen=True)
class LogRow:
    time: str
    device: str
    status: str
    tone: str
    rotation_count: int


@dataclass
class DashboardView:
    """Everything a client needs to draw one device's dashboard."""

    devices: List[str] = field(default_factory=list)
    device_id: Optional[str] = None
    snapshot: Optional[LiveSnapshot] = None
    diagnostic: Optional[Diagnostic] = None
    daily: Optional[DailyStats] = None
    recent: List[LogRow] = field(default_factory=list)


def list_devices(readings: Iterable[Reading]) -> List[str]:
    return sorted({reading.device_id for reading in readings})


def select_device(devices: List[str], requested: Optional[str]) -> Optional[str]:
    """Keep the requested device when it is still reported, else take the first."""
    if requested and requested in devices:
        return requested
    return devices[0] if devices else None


def status_tone(label: str) -> str:
    if "HIGH" in label:
        return "alert"
    if "FLOW" in label:
        return "flow"
    return "neutral"


class DashboardService:
    """Coordinates the compliance engine and diagnostics for one device."""

    def __init__(
        self,
        engine: ComplianceEngine,
        recent_rows: int = 15,
    ) -> None:
        self.engine = engine
        self.recent_rows = recent_rows

    def device_history(
        self,
        readings: Iterable[Reading],
        device_id: str,
        now: Optional[datetime] = None,
    ) -> List[Reading]:
        """Return one device's readings, newest first."""
        history = [r for r in readings if r.device_id == device_id]
        return sorted(
            history,
            key=lambda r: normalize_for_bucketing(r.timestamp, now),
            reverse=True,
        )

    def build(
        self,
        readings: Iterable[Reading],
        device_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DashboardView:
        readings = list(readings)
        devices = list_devices(readings)
        selected = select_device(devices, device_id)
        if device_id and selected != device_id:
            logger.info(
                "Requested device not in history; falling back",
                extra={"device_id": device_id, "reason": "unknown device"},
            )
        view = DashboardView(devices=devices, device_id=selected)
        if selected is None:
            return view

        history = self.device_history(readings, selected, now)
        latest = history[0]
        view.snapshot = LiveSnapshot(
            rotation_count=latest.rotation_count,
            pressure=latest.pressure,
            pressure_band=pressure_band(latest.pressure),
            gauge_percent=gauge_percent(latest.pressure),
            last_sync=normalize_for_display(latest.timestamp),
        )
        view.diagnostic = classify_reading(latest, self.engine.low_flow_threshold)
        view.daily = self.engine.process_daily_stats(history, now)
        view.recent = [self._log_row(r) for r in history[: self.recent_rows]]

        logger.debug(
            "Built dashboard",
            extra={
                "device_id": selected,
                "reading_count": len(history),
                "score": view.daily.today.metrics.score,
            },
        )
        return view

    @staticmethod
    def _log_row(reading: Reading) -> LogRow:
        label = reading.status_label or STATUS_PLACEHOLDER
        return LogRow(
            time=normalize_for_display(reading.timestamp),
            device=reading.device_id[-5:],
            status=label,
            tone=status_tone(label),
            rotation_count=reading.rotation_count,
        )


@lru_cache
def build_default_dashboard() -> DashboardService:
    """Factory that wires the dashboard with the settings-driven engine."""
    settings = get_settings()
    return DashboardService(
        engine=build_default_engine(),
        recent_rows=settings.recent_log_rows,
    )
