"""Tests for configuration loading and validation."""

import dataclasses

import pytest

from slotbook.config import (
    ApiConfig,
    AppConfig,
    SchedulingConfig,
    StorageConfig,
    _safe_bool,
    _safe_int,
    _validate_config,
)


def _config(**sub_configs):
    return dataclasses.replace(AppConfig(), **sub_configs)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_zero_granularity_rejected(self):
        config = _config(scheduling=SchedulingConfig(slot_granularity_minutes=0))
        with pytest.raises(ValueError, match="SLOT_GRANULARITY_MINUTES"):
            _validate_config(config)

    def test_granularity_longer_than_a_day_rejected(self):
        config = _config(scheduling=SchedulingConfig(slot_granularity_minutes=1441))
        with pytest.raises(ValueError, match="SLOT_GRANULARITY_MINUTES"):
            _validate_config(config)

    def test_horizon_must_be_positive(self):
        config = _config(scheduling=SchedulingConfig(booking_horizon_days=0))
        with pytest.raises(ValueError, match="BOOKING_HORIZON_DAYS"):
            _validate_config(config)

    def test_unknown_backend_rejected(self):
        config = _config(storage=StorageConfig(backend="redis"))
        with pytest.raises(ValueError, match="STORE_BACKEND"):
            _validate_config(config)

    def test_sql_backend_needs_url(self):
        config = _config(storage=StorageConfig(backend="sql", database_url=""))
        with pytest.raises(ValueError, match="DATABASE_URL"):
            _validate_config(config)

    def test_port_out_of_range(self):
        config = _config(api=ApiConfig(port=70000))
        with pytest.raises(ValueError, match="API_PORT"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_default(self):
        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_bad_value(self, monkeypatch):
        monkeypatch.setenv("SLOTBOOK_TEST_INT", "ten")
        with pytest.raises(ValueError, match="SLOTBOOK_TEST_INT"):
            _safe_int("SLOTBOOK_TEST_INT", "1")

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("no", False), ("", False)])
    def test_safe_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("SLOTBOOK_TEST_BOOL", raw)
        assert _safe_bool("SLOTBOOK_TEST_BOOL", "false") is expected

    def test_safe_bool_bad_value(self, monkeypatch):
        monkeypatch.setenv("SLOTBOOK_TEST_BOOL", "sometimes")
        with pytest.raises(ValueError, match="SLOTBOOK_TEST_BOOL"):
            _safe_bool("SLOTBOOK_TEST_BOOL", "false")
