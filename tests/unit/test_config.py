"""Unit tests for client settings."""

import pytest

from src.core.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    monkeypatch.delenv("API_BASE_URL", raising=False)

    settings = Settings(_env_file=None)

    assert settings.api_base_url == "http://localhost:8000"
    assert settings.transcribe_timeout > settings.request_timeout
    assert "mp3" in settings.allowed_audio_extensions
    assert settings.logout_retry_attempts == 2


def test_environment_override(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "https://quicknote.example")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.api_base_url == "https://quicknote.example"
    assert settings.log_level == "debug"


def test_cached_singleton():
    assert get_settings() is get_settings()
