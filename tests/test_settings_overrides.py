from __future__ import annotations

from typing import Iterable

from cli.config import load_config
from services.compliance import build_default_engine
from services.dashboard import build_default_dashboard
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


CACHES = (get_settings, build_default_engine, build_default_dashboard)


def test_environment_overrides_apply(monkeypatch) -> None:
    monkeypatch.setenv("SESSION_TARGET_MINUTES", "90")
    monkeypatch.setenv("LOW_FLOW_THRESHOLD", "25.5")
    monkeypatch.setenv("DAILY_STATS_DAYS", "7")
    monkeypatch.setenv("RECENT_LOG_ROWS", "30")
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    _clear_caches(CACHES)

    try:
        settings = get_settings()
        service = build_default_dashboard()

        assert settings.log_level == "DEBUG"
        assert service.recent_rows == 30
        assert service.engine is build_default_engine()
        assert service.engine.target_minutes == 90
        assert service.engine.low_flow_threshold == 25.5
        assert service.engine.history_days == 7
    finally:
        _clear_caches(CACHES)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("SESSION_TARGET_MINUTES", "soon")
    monkeypatch.setenv("LOW_FLOW_THRESHOLD", "-4")
    monkeypatch.setenv("DAILY_STATS_DAYS", "0")
    monkeypatch.setenv("RECENT_LOG_ROWS", "   ")
    _clear_caches(CACHES)

    try:
        settings = get_settings()

        assert settings.session_target_minutes == 120
        assert settings.low_flow_threshold == 10.0
        assert settings.daily_stats_days == 5
        assert settings.recent_log_rows == 15
    finally:
        _clear_caches(CACHES)


def test_cli_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("HISTORY_BASE_URL", "https://telemetry.example/")
    monkeypatch.setenv("CLI_POLL_INTERVAL", "5")
    monkeypatch.setenv("CLI_REQUEST_TIMEOUT", "nope")

    config = load_config()

    assert config.base_url == "https://telemetry.example"
    assert config.poll_interval == 5.0
    assert config.request_timeout == 10.0

    override = load_config(base_url="http://localhost:9000", poll_interval=1.0)
    assert override.base_url == "http://localhost:9000"
    assert override.poll_interval == 1.0
