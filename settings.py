from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_LOG_LEVEL_ENV = "LOG_LEVEL"
_TARGET_MINUTES_ENV = "SESSION_TARGET_MINUTES"
_LOW_FLOW_ENV = "LOW_FLOW_THRESHOLD"
_DAILY_DAYS_ENV = "DAILY_STATS_DAYS"
_RECENT_ROWS_ENV = "RECENT_LOG_ROWS"


@dataclass(frozen=True)
class Settings:
    session_target_minutes: int
    low_flow_threshold: float
    daily_stats_days: int
    recent_log_rows: int
    log_level: str


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        session_target_minutes=_read_positive_int(_TARGET_MINUTES_ENV, 120),
        low_flow_threshold=_read_positive_float(_LOW_FLOW_ENV, 10.0),
        daily_stats_days=_read_positive_int(_DAILY_DAYS_ENV, 5),
        recent_log_rows=_read_positive_int(_RECENT_ROWS_ENV, 15),
        log_level=_read_log_level("INFO"),
    )
