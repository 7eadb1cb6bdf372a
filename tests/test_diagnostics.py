from __future__ import annotations

import pytest

from models.records import Reading
from services.diagnostics import (
    LEVEL_CRITICAL,
    LEVEL_IDLE,
    LEVEL_INFO,
    LEVEL_NOMINAL,
    LEVEL_OFFLINE,
    LEVEL_WARNING,
    classify_reading,
    connection_failure,
    gauge_percent,
    pressure_band,
)


def _reading(turns: int, pressure: float, status: str | None = None) -> Reading:
    return Reading(
        device_id="valve-1",
        timestamp="2024-03-10 06:00:00",
        rotation_count=turns,
        pressure=pressure,
        status_label=status,
    )


def test_ghost_flow_outranks_device_status() -> None:
    diagnostic = classify_reading(_reading(3, 4.0, status="FLOW OK"))

    assert diagnostic.level == LEVEL_CRITICAL
    assert diagnostic.message == "GHOST FLOW DETECTED"
    assert diagnostic.detail == "CRITICAL: Valve Open but Flow is Zero"


def test_closed_valve_without_pressure_is_not_ghost_flow() -> None:
    diagnostic = classify_reading(_reading(0, 0.0))

    assert diagnostic.level == LEVEL_IDLE
    assert diagnostic.message == "SYSTEM IDLE"


def test_high_pressure_warning() -> None:
    diagnostic = classify_reading(_reading(0, 2600.0))

    assert diagnostic.level == LEVEL_WARNING
    assert diagnostic.message == "WARNING: HIGH PRESSURE"


def test_low_pressure_warning_when_flowing() -> None:
    diagnostic = classify_reading(_reading(2, 500.0))

    assert diagnostic.level == LEVEL_WARNING
    assert diagnostic.message == "LOW PRESSURE WARNING"


def test_device_status_label_is_reported() -> None:
    diagnostic = classify_reading(_reading(2, 1200.0, status="FLOW ACTIVE"))

    assert diagnostic.level == LEVEL_INFO
    assert diagnostic.message == "FLOW ACTIVE"


def test_nominal_when_flowing_without_label() -> None:
    diagnostic = classify_reading(_reading(2, 1200.0))

    assert diagnostic.level == LEVEL_NOMINAL
    assert diagnostic.message == "SYSTEM NOMINAL"


def test_custom_low_flow_threshold() -> None:
    assert classify_reading(_reading(1, 15.0), low_flow_threshold=20.0).level == LEVEL_CRITICAL


def test_connection_failure() -> None:
    diagnostic = connection_failure("Server Offline: 502")

    assert diagnostic.level == LEVEL_OFFLINE
    assert diagnostic.message == "CONNECTION FAILURE"
    assert diagnostic.detail == "Server Offline: 502"


@pytest.mark.parametrize(
    ("value", "band"),
    [(None, "LOW"), (0, "LOW"), (800, "LOW"), (801, "NORMAL"), (2200, "NORMAL"), (2201, "HIGH")],
)
def test_pressure_band(value, band) -> None:
    assert pressure_band(value) == band


def test_gauge_percent_is_clamped() -> None:
    assert gauge_percent(1500.0) == 50.0
    assert gauge_percent(4500.0) == 100.0
    assert gauge_percent(-10.0) == 0.0
