"""Unit tests for timestamp normalization."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from services.timestamps import (
    DISPLAY_ZONE,
    INVALID_TIME,
    UNKNOWN_TIME,
    bucket_key,
    format_clock,
    normalize,
    normalize_for_bucketing,
    normalize_for_display,
    parse_instant,
    today_key,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_unzoned_string_is_shifted_back_by_fixed_correction() -> None:
    as_utc = datetime(2024, 3, 10, 4, 15, tzinfo=timezone.utc)

    corrected = normalize("2024-03-10 04:15:00")

    assert corrected is not None
    assert as_utc - corrected == timedelta(hours=5, minutes=30)
    assert corrected.astimezone(DISPLAY_ZONE).strftime("%H:%M:%S") == "04:15:00"


def test_space_and_t_separators_are_equivalent() -> None:
    assert parse_instant("2024-03-10 04:15:00") == parse_instant("2024-03-10T04:15:00")


def test_zone_marker_is_honoured() -> None:
    parsed = parse_instant("2024-03-10T04:15:00+05:30")

    assert parsed == datetime(2024, 3, 9, 22, 45, tzinfo=timezone.utc)


def test_naive_datetime_is_treated_like_unzoned_string() -> None:
    assert normalize(datetime(2024, 3, 10, 4, 15)) == normalize("2024-03-10 04:15:00")


def test_display_renders_kolkata_wall_clock() -> None:
    assert normalize_for_display("2024-03-10 04:15:00") == "Mar 10, 04:15:00 AM"
    assert normalize_for_display("2024-03-10T16:05:09Z") == "Mar 10, 04:05:09 PM"


def test_display_sentinels_for_missing_and_invalid_values() -> None:
    assert normalize_for_display(None) == UNKNOWN_TIME
    assert normalize_for_display("   ") == UNKNOWN_TIME
    assert normalize_for_display("not-a-date") == INVALID_TIME
    assert normalize_for_display(12345) == INVALID_TIME  # type: ignore[arg-type]


def test_bucketing_falls_back_to_reference_instant() -> None:
    assert normalize_for_bucketing(None, now=NOW) == NOW
    assert normalize_for_bucketing("garbage", now=NOW) == NOW


def test_display_and_bucketing_variants_differ_for_missing_value() -> None:
    display = normalize_for_display(None)
    key = bucket_key(None, now=NOW)

    assert display == UNKNOWN_TIME
    assert key == today_key(NOW) == "2024-03-10"
    assert display != key


def test_bucket_uses_corrected_day_not_raw_calendar_date() -> None:
    # 02:00 at +05:30 is 20:30 UTC on the previous day; the correction keeps it there.
    assert bucket_key("2024-03-11T02:00:00+05:30") == "2024-03-10"


def test_utc_labelled_late_evening_shifts_back_before_bucketing() -> None:
    corrected = normalize("2024-03-10T23:45:00Z")

    assert corrected is not None
    assert corrected.astimezone(timezone.utc).strftime("%H:%M") == "18:15"
    assert bucket_key("2024-03-10T23:45:00Z") == "2024-03-10"


def test_today_key_uses_display_calendar() -> None:
    late_utc = datetime(2024, 3, 10, 20, 0, tzinfo=timezone.utc)

    assert today_key(late_utc) == "2024-03-11"


def test_format_clock_is_twelve_hour() -> None:
    instant = normalize("2024-03-10 16:07:00")

    assert instant is not None
    assert format_clock(instant) == "04:07 PM"
