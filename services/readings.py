"""Adapter from raw history payloads to ``Reading`` records."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

from models.records import Reading

logger = logging.getLogger(__name__)

# Schema revisions disagree on the rotation-count column; the first wins.
ROTATION_FIELDS = ("turns", "valve_turns")


def _coerce_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def resolve_rotation_count(payload: Mapping[str, Any]) -> int:
    """Return the non-negative rotation count of a payload.

    ``turns`` is preferred whenever it is present, an explicit zero included;
    ``valve_turns`` is only consulted when ``turns`` is absent or null.
    """
    for name in ROTATION_FIELDS:
        raw = payload.get(name)
        if raw is None:
            continue
        number = _coerce_number(raw)
        if number is None:
            logger.debug(
                "Non-numeric rotation count defaulted to zero",
                extra={"raw_value": raw, "reason": f"invalid {name}"},
            )
            return 0
        return max(0, int(number))
    return 0


def resolve_pressure(payload: Mapping[str, Any]) -> float:
    raw = payload.get("pressure_val")
    if raw is None:
        return 0.0
    number = _coerce_number(raw)
    if number is None:
        logger.debug(
            "Non-numeric pressure defaulted to zero",
            extra={"raw_value": raw, "reason": "invalid pressure_val"},
        )
        return 0.0
    return number


def reading_from_payload(payload: Mapping[str, Any]) -> Reading:
    status = payload.get("valve_status")
    if status is not None:
        status = str(status).strip() or None
    return Reading(
        device_id=str(payload.get("valve_id") or ""),
        timestamp=payload.get("created_at"),
        rotation_count=resolve_rotation_count(payload),
        pressure=resolve_pressure(payload),
        status_label=status,
    )


def readings_from_payloads(payloads: Iterable[Any]) -> list[Reading]:
    """Convert a history batch, skipping entries without a device id."""
    readings: list[Reading] = []
    for index, payload in enumerate(payloads):
        if not isinstance(payload, Mapping):
            logger.warning(
                "Skipping history entry %d",
                index,
                extra={"reason": "entry is not an object"},
            )
            continue
        if not payload.get("valve_id"):
            logger.warning(
                "Skipping history entry %d",
                index,
                extra={"reason": "missing valve_id"},
            )
            continue
        readings.append(reading_from_payload(payload))
    return readings
