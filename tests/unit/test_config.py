"""Unit tests for environment configuration."""
from datetime import datetime, timedelta

import pytest

from registration_portal.utils import config
from registration_portal.utils.config import (
    DEFAULT_STORE_FILE,
    DEFAULT_TIMEOUT,
    Settings,
    get_settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Environment without any registration settings and no .env loading."""
    monkeypatch.setattr(config, "_ENV_LOADED", True)
    for key in config._ENV_KEYS:
        # setenv first so anything written during the test is undone
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


class TestGetSettings:
    """Test get_settings function."""

    def test_defaults(self, clean_env):
        settings = get_settings()

        assert settings.endpoint_url == ""
        assert settings.payload_format == "form"
        assert settings.timeout == DEFAULT_TIMEOUT
        assert settings.store_file == DEFAULT_STORE_FILE
        assert settings.id_prefix == "AIMS"
        assert settings.baseline_members == 0
        assert settings.remote_configured is False

    def test_reads_environment(self, clean_env):
        clean_env.setenv("REGISTRATION_ENDPOINT_URL", " https://script.google.com/macros/s/abc/exec ")
        clean_env.setenv("REGISTRATION_PAYLOAD_FORMAT", "JSON")
        clean_env.setenv("REGISTRATION_TIMEOUT", "5")
        clean_env.setenv("REGISTRATION_BASELINE_MEMBERS", "11")
        clean_env.setenv("LOG_LEVEL", "debug")

        settings = get_settings()

        assert settings.endpoint_url == "https://script.google.com/macros/s/abc/exec"
        assert settings.payload_format == "json"
        assert settings.timeout == 5.0
        assert settings.baseline_members == 11
        assert settings.log_level == "DEBUG"
        assert settings.remote_configured is True

    def test_invalid_numbers_fall_back_to_defaults(self, clean_env, caplog):
        clean_env.setenv("REGISTRATION_TIMEOUT", "soon")
        clean_env.setenv("REGISTRATION_RESET_DELAY", "-3")
        clean_env.setenv("REGISTRATION_BASELINE_MEMBERS", "many")

        settings = get_settings()

        assert settings.timeout == DEFAULT_TIMEOUT
        assert settings.reset_delay == 1.0
        assert settings.baseline_members == 0
        assert "REGISTRATION_TIMEOUT" in caplog.text

    def test_timezone_setting(self, clean_env):
        clean_env.setenv("REGISTRATION_TIMEZONE", "Asia/Karachi")

        settings = get_settings()

        assert settings.timezone == "Asia/Karachi"
        assert settings.display_tz.utcoffset(datetime(2026, 10, 19)) == timedelta(hours=5)

    def test_blank_timezone_means_system_local(self, clean_env):
        assert get_settings().display_tz is None

    def test_unknown_payload_format_falls_back_to_form(self, clean_env):
        clean_env.setenv("REGISTRATION_PAYLOAD_FORMAT", "xml")

        assert get_settings().payload_format == "form"


class TestEnvFile:
    """Test .env loading."""

    def test_env_file_fills_missing_keys_only(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "REGISTRATION_SOURCE='AIMS Website Registration - LGU'\n"
            "REGISTRATION_ID_PREFIX=LGU\n"
            "UNRELATED_KEY=ignored\n",
            encoding="utf-8",
        )
        clean_env.setattr(config, "_ENV_LOADED", False)
        clean_env.setenv("REGISTRATION_ID_PREFIX", "KEEP")
        clean_env.delenv("UNRELATED_KEY", raising=False)

        config._load_env_file(env_file)
        settings = get_settings()

        assert settings.source == "AIMS Website Registration - LGU"
        assert settings.id_prefix == "KEEP"
        assert "UNRELATED_KEY" not in config.os.environ


class TestRemoteConfigured:
    """Test the placeholder check on Settings."""

    @pytest.mark.parametrize("url", [
        "",
        "   ",
        "https://script.google.com/macros/s/YOUR_GOOGLE_SCRIPT_ID/exec",
    ])
    def test_unusable_urls(self, url):
        assert Settings(endpoint_url=url).remote_configured is False

    def test_real_url(self):
        assert Settings(endpoint_url="https://example.com/hook").remote_configured is True
