"""
Tests for environment validation and configuration helpers.
"""

import pytest

from api.config import NUMERIC_VARS, get_cors_origins, scheduler_enabled, validate_env


class TestValidateEnv:

    def test_defaults_pass(self, monkeypatch):
        for var in NUMERIC_VARS:
            monkeypatch.delenv(var, raising=False)
        validate_env()

    def test_numeric_values_pass(self, monkeypatch):
        monkeypatch.setenv("BUDGET_LIMIT", "120.5")
        monkeypatch.setenv("LOCK_MINUTES", "30")
        validate_env()

    def test_bad_values_rejected(self, monkeypatch):
        monkeypatch.setenv("BUDGET_LIMIT", "lots")
        monkeypatch.setenv("LOCK_MINUTES", "-5")
        with pytest.raises(ValueError) as exc:
            validate_env()
        assert "BUDGET_LIMIT" in str(exc.value)
        assert "LOCK_MINUTES" in str(exc.value)


class TestHelpers:

    def test_cors_origins(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
        assert get_cors_origins() == ["http://a.test", "http://b.test"]

    def test_scheduler_switch(self, monkeypatch):
        monkeypatch.setenv("ENABLE_SCHEDULER", "false")
        assert not scheduler_enabled()
        monkeypatch.setenv("ENABLE_SCHEDULER", "yes")
        assert scheduler_enabled()
