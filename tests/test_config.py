"""Tests for settings and logging setup."""

from __future__ import annotations

import structlog

from coregulation.config import DEFAULT_BAND_BOUNDARIES, Settings, get_settings
from coregulation.logger import session_context, setup_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.default_band_boundaries == DEFAULT_BAND_BOUNDARIES
        assert settings.smoothing_capacity == 5
        assert settings.sustain_seconds == 20.0
        assert settings.window_seconds == 30.0
        assert settings.correlation_threshold == 0.7

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("COREGULATION_SUSTAIN_SECONDS", "12.5")
        monkeypatch.setenv("COREGULATION_LOG_LEVEL", "DEBUG")
        settings = Settings(_env_file=None)
        assert settings.sustain_seconds == 12.5
        assert settings.log_level == "DEBUG"

    def test_cached(self):
        assert get_settings() is get_settings()


class TestLogging:
    def test_setup_and_session_context(self, capsys):
        try:
            setup_logging("INFO", json=True)
            log = structlog.get_logger("coregulation.test")
            with session_context("S042"):
                log.info("test.event", value=1)
            log.debug("test.hidden")
            out = capsys.readouterr().out
            assert '"session_id": "S042"' in out
            assert '"event": "test.event"' in out
            assert "test.hidden" not in out
        finally:
            structlog.reset_defaults()
