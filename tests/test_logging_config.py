from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.compliance",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Computed day metrics",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    message = formatter.format(_record(day="2024-03-10", score=50, unrelated="x"))

    assert message == "Computed day metrics | day=2024-03-10 score=50"


def test_formatter_skips_missing_and_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record(device_id=None)) == "Computed day metrics"


def test_formatter_accepts_custom_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["unrelated"])

    assert formatter.format(_record(day="2024-03-10", unrelated="x")) == (
        "Computed day metrics | unrelated=x"
    )
