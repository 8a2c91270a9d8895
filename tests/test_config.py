"""Tests for configuration loading and validation."""

import pytest

from slot_engine.config import (
    AppConfig,
    EngineConfig,
    PolicyDefaults,
    ResourceDefaults,
    _safe_bool,
    _safe_float,
    _safe_int,
    _validate_config,
    settings,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_unknown_timezone(self):
        config = AppConfig(resources=ResourceDefaults(timezone="Atlantis/Capital"))
        with pytest.raises(ValueError, match="DEFAULT_TIMEZONE"):
            _validate_config(config)

    def test_bad_currency_code(self):
        config = AppConfig(resources=ResourceDefaults(currency="POUNDS"))
        with pytest.raises(ValueError, match="DEFAULT_CURRENCY"):
            _validate_config(config)

    def test_zero_slot_duration(self):
        config = AppConfig(policy=PolicyDefaults(slot_duration_minutes=0))
        with pytest.raises(ValueError, match="DEFAULT_SLOT_DURATION_MINUTES"):
            _validate_config(config)

    def test_negative_buffer(self):
        config = AppConfig(policy=PolicyDefaults(buffer_minutes=-5))
        with pytest.raises(ValueError, match="DEFAULT_BUFFER_MINUTES"):
            _validate_config(config)

    def test_negative_advance_days(self):
        config = AppConfig(policy=PolicyDefaults(advance_booking_days=-1))
        with pytest.raises(ValueError, match="DEFAULT_ADVANCE_BOOKING_DAYS"):
            _validate_config(config)

    def test_negative_cancellation_hours(self):
        config = AppConfig(policy=PolicyDefaults(cancellation_hours=-1))
        with pytest.raises(ValueError, match="DEFAULT_CANCELLATION_HOURS"):
            _validate_config(config)

    def test_zero_external_max_age(self):
        config = AppConfig(engine=EngineConfig(external_busy_max_age_minutes=0))
        with pytest.raises(ValueError, match="EXTERNAL_BUSY_MAX_AGE_MINUTES"):
            _validate_config(config)

    def test_zero_commit_timeout(self):
        config = AppConfig(engine=EngineConfig(commit_timeout_sec=0))
        with pytest.raises(ValueError, match="COMMIT_TIMEOUT_SECONDS"):
            _validate_config(config)

    def test_zero_calendar_days(self):
        config = AppConfig(engine=EngineConfig(max_calendar_days=0))
        with pytest.raises(ValueError, match="MAX_CALENDAR_DAYS"):
            _validate_config(config)


class TestSafeParsers:
    def test_int_from_env(self, monkeypatch):
        monkeypatch.setenv("SLOT_TEST_INT", "45")
        assert _safe_int("SLOT_TEST_INT", "60") == 45

    def test_int_default(self, monkeypatch):
        monkeypatch.delenv("SLOT_TEST_INT", raising=False)
        assert _safe_int("SLOT_TEST_INT", "60") == 60

    def test_int_invalid(self, monkeypatch):
        monkeypatch.setenv("SLOT_TEST_INT", "sixty")
        with pytest.raises(ValueError, match="SLOT_TEST_INT"):
            _safe_int("SLOT_TEST_INT", "60")

    def test_float_invalid(self, monkeypatch):
        monkeypatch.setenv("SLOT_TEST_FLOAT", "fast")
        with pytest.raises(ValueError, match="SLOT_TEST_FLOAT"):
            _safe_float("SLOT_TEST_FLOAT", "5.0")

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("YES", True), ("1", True), (" on ", True),
        ("false", False), ("No", False), ("0", False), ("off", False),
    ])
    def test_bool_values(self, monkeypatch, raw, expected):
        monkeypatch.setenv("SLOT_TEST_BOOL", raw)
        assert _safe_bool("SLOT_TEST_BOOL", "true") is expected

    def test_bool_invalid(self, monkeypatch):
        monkeypatch.setenv("SLOT_TEST_BOOL", "maybe")
        with pytest.raises(ValueError, match="SLOT_TEST_BOOL"):
            _safe_bool("SLOT_TEST_BOOL", "true")


class TestSettings:
    def test_settings_singleton_is_valid(self):
        _validate_config(settings)
        assert settings.policy.slot_duration_minutes >= 1
        assert settings.engine.commit_timeout_sec > 0

    def test_config_is_frozen(self):
        with pytest.raises(AttributeError):
            settings.log_level = "DEBUG"
