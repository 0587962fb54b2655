"""Tests for settings loading and logging setup."""

import logging

import pytest
from pydantic import ValidationError

from scoreline.config import Settings
from scoreline.utilities.logging import setup_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.sport == "tennis"
        assert settings.league_directory_limit == 25
        assert settings.odds_market_index == 0
        assert settings.window_days_past == 4
        assert settings.window_days_ahead == 8

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SCORELINE_SPORT", "soccer")
        monkeypatch.setenv("SCORELINE_ODDS_MARKET_INDEX", "2")
        monkeypatch.setenv("SCORELINE_MAX_CONCURRENT_REQUESTS", "4")
        settings = Settings()
        assert settings.sport == "soccer"
        assert settings.odds_market_index == 2
        assert settings.max_concurrent_requests == 4

    def test_rejects_negative_market_index(self):
        with pytest.raises(ValidationError):
            Settings(odds_market_index=-1)

    def test_rejects_zero_concurrency(self):
        with pytest.raises(ValidationError):
            Settings(max_concurrent_requests=0)


class TestSetupLogging:
    def test_idempotent(self):
        root = logging.getLogger()
        setup_logging("DEBUG")
        before = len(root.handlers)
        setup_logging("INFO")
        assert len(root.handlers) == before
        assert root.level == logging.INFO
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.INFO
