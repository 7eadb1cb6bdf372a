"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from models.records import ComplianceCard, DailyStats, DayMetrics, DayRow, Diagnostic
from services.dashboard import DashboardView, LiveSnapshot, LogRow


class DailyStatsRequest(BaseModel):
    """Raw history entries plus an optional reference instant for "today"."""

    readings: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="History entries as returned by the telemetry server.",
    )
    now: Optional[datetime] = Field(
        default=None, description="Reference instant; defaults to the current time."
    )


class DashboardRequest(DailyStatsRequest):
    device_id: Optional[str] = Field(
        default=None, description="Device to display; defaults to the first known device."
    )


class DayMetricsOut(BaseModel):
    start_time: str
    duration_minutes: int = Field(..., ge=0)
    duration: str
    score: int = Field(..., ge=0, le=100)
    average_pressure: Optional[int] = None
    ghost_flow: bool = False
    session_start: Optional[datetime] = None
    session_end: Optional[datetime] = None

    @classmethod
    def from_domain(cls, metrics: DayMetrics) -> "DayMetricsOut":
        session = metrics.session
        return cls(
            start_time=metrics.start_time,
            duration_minutes=metrics.duration_minutes,
            duration=metrics.duration,
            score=metrics.score,
            average_pressure=metrics.average_pressure,
            ghost_flow=metrics.ghost_flow,
            session_start=session.start if session else None,
            session_end=session.end if session else None,
        )


class DayRowOut(BaseModel):
    day: str
    metrics: DayMetricsOut
    pressure_band: str

    @classmethod
    def from_domain(cls, row: DayRow) -> "DayRowOut":
        return cls(
            day=row.day,
            metrics=DayMetricsOut.from_domain(row.metrics),
            pressure_band=row.pressure_band,
        )


class ComplianceCardOut(BaseModel):
    day: str
    metrics: DayMetricsOut
    adherence: str
    pressure_band: str

    @classmethod
    def from_domain(cls, card: ComplianceCard) -> "ComplianceCardOut":
        return cls(
            day=card.day,
            metrics=DayMetricsOut.from_domain(card.metrics),
            adherence=card.adherence,
            pressure_band=card.pressure_band,
        )


class DailyStatsOut(BaseModel):
    today: ComplianceCardOut
    days: List[DayRowOut] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, stats: DailyStats) -> "DailyStatsOut":
        return cls(
            today=ComplianceCardOut.from_domain(stats.today),
            days=[DayRowOut.from_domain(row) for row in stats.days],
        )


class DiagnosticOut(BaseModel):
    level: str
    message: str
    detail: Optional[str] = None

    @classmethod
    def from_domain(cls, diagnostic: Diagnostic) -> "DiagnosticOut":
        return cls(level=diagnostic.level, message=diagnostic.message, detail=diagnostic.detail)


class LiveSnapshotOut(BaseModel):
    rotation_count: int = Field(..., ge=0)
    pressure: float
    pressure_band: str
    gauge_percent: float = Field(..., ge=0, le=100)
    last_sync: str

    @classmethod
    def from_domain(cls, snapshot: LiveSnapshot) -> "LiveSnapshotOut":
        return cls(
            rotation_count=snapshot.rotation_count,
            pressure=snapshot.pressure,
            pressure_band=snapshot.pressure_band,
            gauge_percent=snapshot.gauge_percent,
            last_sync=snapshot.last_sync,
        )


class LogRowOut(BaseModel):
    time: str
    device: str
    status: str
    tone: str
    rotation_count: int

    @classmethod
    def from_domain(cls, row: LogRow) -> "LogRowOut":
        return cls(
            time=row.time,
            device=row.device,
            status=row.status,
            tone=row.tone,
            rotation_count=row.rotation_count,
        )


class DashboardResponse(BaseModel):
    """Full dashboard payload for the selected device."""

    devices: List[str] = Field(default_factory=list)
    device_id: Optional[str] = None
    snapshot: Optional[LiveSnapshotOut] = None
    diagnostic: Optional[DiagnosticOut] = None
    daily: Optional[DailyStatsOut] = None
    recent: List[LogRowOut] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, view: DashboardView) -> "DashboardResponse":
        return cls(
            devices=list(view.devices),
            device_id=view.device_id,
            snapshot=LiveSnapshotOut.from_domain(view.snapshot) if view.snapshot else None,
            diagnostic=DiagnosticOut.from_domain(view.diagnostic) if view.diagnostic else None,
            daily=DailyStatsOut.from_domain(view.daily) if view.daily else None,
            recent=[LogRowOut.from_domain(row) for row in view.recent],
        )
