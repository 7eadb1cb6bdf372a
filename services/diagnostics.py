"""Stateless classification of a device's latest reading."""

from __future__ import annotations

from models.records import Diagnostic, Reading

LEVEL_CRITICAL = "critical"
LEVEL_WARNING = "warning"
LEVEL_INFO = "info"
LEVEL_NOMINAL = "nominal"
LEVEL_IDLE = "idle"
LEVEL_OFFLINE = "offline"

DEFAULT_LOW_FLOW_THRESHOLD = 10.0
HIGH_PRESSURE_ALARM = 2500.0
HIGH_PRESSURE_BAND = 2200.0
NORMAL_PRESSURE_BAND = 800.0
GAUGE_FULL_SCALE = 3000.0


def pressure_band(value: float | None) -> str:
    if value is None:
        return "LOW"
    if value > HIGH_PRESSURE_BAND:
        return "HIGH"
    if value > NORMAL_PRESSURE_BAND:
        return "NORMAL"
    return "LOW"


def gauge_percent(value: float) -> float:
    return max(0.0, min(value / GAUGE_FULL_SCALE * 100, 100.0))


def classify_reading(
    reading: Reading, low_flow_threshold: float = DEFAULT_LOW_FLOW_THRESHOLD
) -> Diagnostic:
    """Classify the most recent reading of a device.

    Ghost flow (valve turned but no pressure) outranks every other
    condition; the device's own status label is reported only when no
    pressure condition applies.
    """
    turns = reading.rotation_count
    pressure = reading.pressure

    if turns > 0 and pressure < low_flow_threshold:
        return Diagnostic(
            level=LEVEL_CRITICAL,
            message="GHOST FLOW DETECTED",
            detail="CRITICAL: Valve Open but Flow is Zero",
        )
    if pressure > HIGH_PRESSURE_ALARM:
        return Diagnostic(level=LEVEL_WARNING, message="WARNING: HIGH PRESSURE")
    if turns > 0 and pressure <= NORMAL_PRESSURE_BAND:
        return Diagnostic(
            level=LEVEL_WARNING,
            message="LOW PRESSURE WARNING",
            detail="Flow detected but pressure is suboptimal",
        )
    if reading.status_label:
        return Diagnostic(level=LEVEL_INFO, message=reading.status_label)
    if turns > 0:
        return Diagnostic(level=LEVEL_NOMINAL, message="SYSTEM NOMINAL")
    return Diagnostic(level=LEVEL_IDLE, message="SYSTEM IDLE")


def connection_failure(detail: str | None = None) -> Diagnostic:
    return Diagnostic(level=LEVEL_OFFLINE, message="CONNECTION FAILURE", detail=detail)
