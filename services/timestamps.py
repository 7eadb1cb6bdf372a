"""Timestamp normalization for server-recorded reading times.

The telemetry server stamps readings with a wall-clock value that runs
5h30m ahead of true UTC while labelling it (or leaving it unlabelled) as UTC.
Every instant is therefore shifted back by a fixed correction and expressed
in the Asia/Kolkata civil calendar before it is displayed or bucketed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from models.records import RawTimestamp

logger = logging.getLogger(__name__)

DISPLAY_ZONE = ZoneInfo("Asia/Kolkata")
CLOCK_CORRECTION = timedelta(hours=5, minutes=30)

UNKNOWN_TIME = "--/-- --:--"
INVALID_TIME = "Invalid Time"


def parse_instant(value: RawTimestamp) -> Optional[datetime]:
    """Parse a raw timestamp into an aware UTC datetime, or ``None``.

    Strings without a zone marker are read as UTC wall-clock values; the
    date and time may be separated by a space or ``T``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return None
        if candidate[-1] in "zZ":
            candidate = candidate[:-1] + "+00:00"
        if "T" not in candidate:
            candidate = candidate.replace(" ", "T", 1)
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize(value: RawTimestamp) -> Optional[datetime]:
    """Return the corrected instant in the display zone, or ``None``."""
    instant = parse_instant(value)
    if instant is None:
        return None
    try:
        return (instant - CLOCK_CORRECTION).astimezone(DISPLAY_ZONE)
    except OverflowError:
        return None


def reference_instant(now: Optional[datetime] = None) -> datetime:
    """Return ``now`` (or the current instant) expressed in the display zone."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(DISPLAY_ZONE)


def format_display(instant: datetime) -> str:
    local = instant.astimezone(DISPLAY_ZONE)
    return f"{local:%b} {local.day}, {local:%I:%M:%S %p}"


def format_clock(instant: datetime) -> str:
    return f"{instant.astimezone(DISPLAY_ZONE):%I:%M %p}"


def normalize_for_display(value: RawTimestamp) -> str:
    """Render a raw timestamp for humans, falling back to a marker string."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return UNKNOWN_TIME
    instant = normalize(value)
    if instant is None:
        logger.debug(
            "Unparseable timestamp rendered as invalid",
            extra={"raw_value": value, "reason": "invalid timestamp"},
        )
        return INVALID_TIME
    return format_display(instant)


def normalize_for_bucketing(
    value: RawTimestamp, now: Optional[datetime] = None
) -> datetime:
    """Return the corrected instant, or the reference instant when unparseable."""
    instant = normalize(value)
    if instant is None:
        logger.debug(
            "Unparseable timestamp bucketed at reference instant",
            extra={"raw_value": value, "reason": "invalid timestamp"},
        )
        return reference_instant(now)
    return instant


def bucket_key(value: RawTimestamp, now: Optional[datetime] = None) -> str:
    return normalize_for_bucketing(value, now).date().isoformat()


def today_key(now: Optional[datetime] = None) -> str:
    return reference_instant(now).date().isoformat()
