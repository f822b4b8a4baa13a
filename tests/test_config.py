"""Tests for environment driven settings."""

from __future__ import annotations

import pytest

from secult_notify.config import ClientSettings, get_client_settings, reset_settings_cache


@pytest.fixture(autouse=True)
def _clean_client_env(monkeypatch):
    for name in (
        "NOTIFY_API_BASE_URL",
        "NOTIFY_PUSH_URL",
        "NOTIFY_RECONNECT_ATTEMPTS",
        "NOTIFY_RECONNECT_DELAY_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


def test_client_defaults_follow_the_reconnect_policy():
    settings = ClientSettings()

    assert settings.reconnect_attempts == 5
    assert settings.reconnect_delay_seconds == 1.0
    assert settings.push_url.endswith("/api/notifications/ws")


def test_client_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("NOTIFY_API_BASE_URL", "https://api.example.com/")
    monkeypatch.setenv("NOTIFY_RECONNECT_ATTEMPTS", "2")

    settings = get_client_settings()

    assert settings.api_base_url == "https://api.example.com"
    assert settings.reconnect_attempts == 2
    assert get_client_settings() is settings
