"""Tests for settings."""

from pathlib import Path

from trailcast.config import (
    DEFAULT_DB_PATH,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_PROVIDER,
    DEFAULT_TIMEZONE,
    Settings,
)


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.provider == DEFAULT_PROVIDER
        assert settings.tomorrow_api_key is None
        assert settings.relay_url is None
        assert settings.db_path == DEFAULT_DB_PATH
        assert settings.timezone == DEFAULT_TIMEZONE
        assert settings.http_timeout == DEFAULT_HTTP_TIMEOUT

    def test_from_env(self):
        settings = Settings.from_env({
            "TRAILCAST_PROVIDER": " Tomorrow ",
            "TOMORROW_API_KEY": "secret",
            "TRAILCAST_RELAY_URL": "https://relay.example.com",
            "TRAILCAST_DB_PATH": "/tmp/tc.duckdb",
            "TRAILCAST_TIMEZONE": "UTC",
            "TRAILCAST_HTTP_TIMEOUT": "5",
        })
        assert settings.provider == "tomorrow"
        assert settings.tomorrow_api_key == "secret"
        assert settings.relay_url == "https://relay.example.com"
        assert settings.db_path == Path("/tmp/tc.duckdb")
        assert settings.timezone == "UTC"
        assert settings.http_timeout == 5.0

    def test_empty_key_is_none(self):
        assert Settings.from_env({"TOMORROW_API_KEY": ""}).tomorrow_api_key is None

    def test_invalid_timeout_falls_back(self, caplog):
        settings = Settings.from_env({"TRAILCAST_HTTP_TIMEOUT": "soon"})
        assert settings.http_timeout == DEFAULT_HTTP_TIMEOUT
        assert "TRAILCAST_HTTP_TIMEOUT" in caplog.text
