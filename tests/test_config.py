"""Tests for settings loading and validation."""
import pytest
from pydantic import ValidationError

from config import Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.work_start_hour == 8
        assert settings.work_end_hour == 18
        assert settings.slot_minutes == 30
        assert settings.seed_demo_data is True
        assert len(settings.slot_grid()) == 20

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CLINIC_SLOT_MINUTES", "60")
        monkeypatch.setenv("CLINIC_SEED_DEMO_DATA", "false")
        monkeypatch.setenv("CLINIC_LOG_LEVEL", "debug")

        settings = Settings()

        assert settings.slot_minutes == 60
        assert settings.seed_demo_data is False
        assert settings.log_level == "DEBUG"
        assert len(settings.slot_grid()) == 10

    def test_start_must_precede_end(self):
        with pytest.raises(ValidationError):
            Settings(work_start_hour=12, work_end_hour=9)

    def test_slot_must_fit_the_day(self):
        with pytest.raises(ValidationError):
            Settings(work_start_hour=8, work_end_hour=9, slot_minutes=90)

    def test_unknown_log_level_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")
