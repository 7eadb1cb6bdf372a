"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

RawTimestamp = Union[str, datetime, None]


@dataclass(frozen=True, slots=True)
class Reading:
    """A single valve telemetry sample, already resolved from the wire shape."""

    device_id: str
    timestamp: RawTimestamp
    rotation_count: int = 0
    pressure: float = 0.0
    status_label: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Session:
    """A contiguous run of active readings inside one day."""

    start: datetime
    end: datetime
    readings: tuple[Reading, ...] = ()
    average_pressure: Optional[int] = None

    @property
    def elapsed_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


@dataclass(frozen=True, slots=True)
class DayMetrics:
    """Compliance metrics for one calendar day."""

    start_time: str = "unknown"
    duration_minutes: int = 0
    duration: str = "0m"
    score: int = 0
    average_pressure: Optional[int] = None
    ghost_flow: bool = False
    session: Optional[Session] = None


@dataclass(frozen=True, slots=True)
class DayRow:
    """A dated entry of the daily stats table."""

    day: str
    metrics: DayMetrics
    pressure_band: str


@dataclass(frozen=True, slots=True)
class ComplianceCard:
    """Summary of today's session against the expected schedule."""

    day: str
    metrics: DayMetrics
    adherence: str
    pressure_band: str


@dataclass(frozen=True, slots=True)
class DailyStats:
    today: ComplianceCard
    days: list[DayRow] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Live classification of a device's most recent reading."""

    level: str
    message: str
    detail: Optional[str] = None
