"""Session detection and daily compliance scoring for valve readings."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Sequence

from models.records import ComplianceCard, DailyStats, DayMetrics, DayRow, Reading, Session
from services.diagnostics import DEFAULT_LOW_FLOW_THRESHOLD, pressure_band
from services.timestamps import bucket_key, format_clock, normalize_for_bucketing, today_key
from settings import get_settings

logger = logging.getLogger(__name__)

OPEN_THRESHOLD = 2
DROP_THRESHOLD = 2
DEFAULT_TARGET_MINUTES = 120
DEFAULT_HISTORY_DAYS = 5

ADHERED = "adhered"
PARTIAL = "partial"
NON_COMPLIANT = "non_compliant"


def adherence_label(score: int) -> str:
    if score >= 80:
        return ADHERED
    if score >= 50:
        return PARTIAL
    return NON_COMPLIANT


def format_duration(minutes: int) -> str:
    if minutes <= 0:
        return "0m"
    return f"{minutes // 60}h {minutes % 60}m"


def _average_pressure(readings: Sequence[Reading]) -> Optional[int]:
    """Floored mean pressure, or ``None`` when it cannot be represented."""
    if not readings:
        return None
    count = len(readings)
    total = sum(r.pressure for r in readings)
    if math.isfinite(total):
        mean = total / count
    else:
        # Large finite values overflow the plain sum; scale each one first.
        mean = sum(r.pressure / count for r in readings)
    if not math.isfinite(mean):
        return None
    return math.floor(mean)


class ComplianceEngine:
    """Pure session/compliance component that can be unit tested in isolation."""

    def __init__(
        self,
        target_minutes: int = DEFAULT_TARGET_MINUTES,
        low_flow_threshold: float = DEFAULT_LOW_FLOW_THRESHOLD,
        history_days: int = DEFAULT_HISTORY_DAYS,
    ) -> None:
        self.target_minutes = target_minutes
        self.low_flow_threshold = low_flow_threshold
        self.history_days = history_days

    def detect_session(
        self, readings: Optional[Sequence[Reading]], now: Optional[datetime] = None
    ) -> Optional[Session]:
        """Scan chronologically ordered readings for the last active session.

        A session opens on the first reading with at least two turns and
        closes when the count drops by two or more from the previous reading
        or reaches zero. The closing reading is not part of the session, so
        the session ends at the last reading that still showed flow.

        ``readings`` must already be sorted ascending by normalized instant.
        """
        active = False
        previous = 0
        start: Optional[datetime] = None
        end: Optional[datetime] = None
        window: List[Reading] = []

        for reading in readings or ():
            instant = normalize_for_bucketing(reading.timestamp, now)
            turns = reading.rotation_count

            if active and (previous - turns >= DROP_THRESHOLD or turns == 0):
                active = False
            elif not active and turns >= OPEN_THRESHOLD:
                active = True
                start = instant
                window = []

            if active:
                window.append(reading)
                end = instant
            previous = turns

        if start is None or end is None:
            return None

        return Session(
            start=start,
            end=end,
            readings=tuple(window),
            average_pressure=_average_pressure(window),
        )

    def compute_day_metrics(
        self, readings: Optional[Sequence[Reading]], now: Optional[datetime] = None
    ) -> DayMetrics:
        session = self.detect_session(readings, now)
        if session is None:
            return DayMetrics()

        duration = max(1, session.elapsed_minutes)
        score = min(100, duration * 100 // self.target_minutes)
        ghost_flow = any(r.pressure < self.low_flow_threshold for r in session.readings)
        return DayMetrics(
            start_time=format_clock(session.start),
            duration_minutes=duration,
            duration=format_duration(duration),
            score=score,
            average_pressure=session.average_pressure,
            ghost_flow=ghost_flow,
            session=session,
        )

    def sort_chronologically(
        self, readings: Iterable[Reading], now: Optional[datetime] = None
    ) -> List[Reading]:
        return sorted(readings, key=lambda r: normalize_for_bucketing(r.timestamp, now))

    def group_by_day(
        self, readings: Iterable[Reading], now: Optional[datetime] = None
    ) -> Dict[str, List[Reading]]:
        """Bucket readings by the corrected civil date of their timestamp."""
        grouped: Dict[str, List[Reading]] = {}
        for reading in readings:
            key = bucket_key(reading.timestamp, now)
            grouped.setdefault(key, []).append(reading)
        return grouped

    def compliance_card(
        self,
        day_readings: Iterable[Reading],
        now: Optional[datetime] = None,
        day: Optional[str] = None,
    ) -> ComplianceCard:
        ordered = self.sort_chronologically(day_readings, now)
        metrics = self.compute_day_metrics(ordered, now)
        return ComplianceCard(
            day=day or today_key(now),
            metrics=metrics,
            adherence=adherence_label(metrics.score),
            pressure_band=pressure_band(metrics.average_pressure),
        )

    def process_daily_stats(
        self, readings: Iterable[Reading], now: Optional[datetime] = None
    ) -> DailyStats:
        """Compute today's compliance card and the most recent daily rows.

        ``now`` pins the reference instant used for "today" and as the
        fallback instant for unparseable timestamps.
        """
        grouped = self.group_by_day(readings, now)
        today = today_key(now)
        card = self.compliance_card(grouped.get(today, []), now, day=today)

        rows: List[DayRow] = []
        for day in sorted(grouped, reverse=True)[: self.history_days]:
            metrics = self.compute_day_metrics(
                self.sort_chronologically(grouped[day], now), now
            )
            logger.debug(
                "Computed day metrics",
                extra={
                    "day": day,
                    "reading_count": len(grouped[day]),
                    "score": metrics.score,
                    "duration_minutes": metrics.duration_minutes,
                },
            )
            rows.append(
                DayRow(
                    day=day,
                    metrics=metrics,
                    pressure_band=pressure_band(metrics.average_pressure),
                )
            )

        return DailyStats(today=card, days=rows)


@lru_cache
def build_default_engine() -> ComplianceEngine:
    """Factory that wires the engine with thresholds from settings."""
    settings = get_settings()
    return ComplianceEngine(
        target_minutes=settings.session_target_minutes,
        low_flow_threshold=settings.low_flow_threshold,
        history_days=settings.daily_stats_days,
    )


def compute_day_metrics(
    readings: Optional[Sequence[Reading]], now: Optional[datetime] = None
) -> DayMetrics:
    return build_default_engine().compute_day_metrics(readings, now)
