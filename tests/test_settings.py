"""Tests for central configuration settings."""

import os
from unittest.mock import patch

import pytest

from config.settings import (
    ApiSettings,
    AppSettings,
    JobSettings,
    get_settings,
)


class TestApiSettings:
    def test_defaults_applied(self):
        env = {k: v for k, v in os.environ.items() if not k.startswith("AAP_")}
        with patch.dict(os.environ, env, clear=True):
            settings = ApiSettings()
            assert settings.host == ""
            assert settings.api_path == "/api/v2"
            assert settings.insecure_skip_verify is False
            assert settings.request_timeout == 30.0

    def test_env_override(self):
        with patch.dict(os.environ, {
            "AAP_HOST": "https://aap.example.com",
            "AAP_USERNAME": "admin",
            "AAP_PASSWORD": "secret",
            "AAP_INSECURE_SKIP_VERIFY": "true",
        }, clear=False):
            settings = ApiSettings()
            assert settings.host == "https://aap.example.com"
            assert settings.username == "admin"
            assert settings.password.get_secret_value() == "secret"
            assert settings.insecure_skip_verify is True

    def test_secret_not_in_repr(self):
        with patch.dict(os.environ, {"AAP_PASSWORD": "super-secret", "AAP_TOKEN": "tok-123"}, clear=False):
            settings = ApiSettings()
            repr_str = repr(settings)
            assert "super-secret" not in repr_str
            assert "tok-123" not in repr_str
            assert "**" in repr_str


class TestJobSettings:
    def test_defaults(self):
        env = {k: v for k, v in os.environ.items() if not k.startswith("AAP_JOB_")}
        with patch.dict(os.environ, env, clear=True):
            settings = JobSettings()
            assert settings.poll_interval_seconds == 1.0
            assert settings.poll_max_interval_seconds == 10.0

    def test_env_override(self):
        with patch.dict(os.environ, {"AAP_JOB_POLL_MAX_INTERVAL_SECONDS": "30"}, clear=False):
            assert JobSettings().poll_max_interval_seconds == 30


class TestAppSettings:
    def test_missing_host_raises_in_production(self):
        env = os.environ.copy()
        for key in ("AAP_HOST", "TESTING"):
            env.pop(key, None)
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ValueError, match="AAP_HOST"):
                AppSettings()

    def test_host_satisfies_production_check(self):
        env = os.environ.copy()
        env.pop("TESTING", None)
        env["AAP_HOST"] = "https://aap.example.com"
        with patch.dict(os.environ, env, clear=True):
            assert AppSettings().api.host == "https://aap.example.com"

    def test_logging_fields(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG", "LOG_FORMAT": "text"}, clear=False):
            settings = AppSettings()
            assert settings.log_level == "DEBUG"
            assert settings.log_format == "text"


class TestGetSettings:
    def test_singleton(self):
        get_settings.cache_clear()
        s1 = get_settings()
        s2 = get_settings()
        assert s1 is s2
        get_settings.cache_clear()

    def test_cache_clear_resets(self):
        get_settings.cache_clear()
        s1 = get_settings()
        get_settings.cache_clear()
        s2 = get_settings()
        assert s2 is not s1
        get_settings.cache_clear()

    def test_nested_groups_initialized(self):
        get_settings.cache_clear()
        s = get_settings()
        assert s.api is not None
        assert s.jobs is not None
        get_settings.cache_clear()
