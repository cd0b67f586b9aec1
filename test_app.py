"""
Application Wiring and Settings Tests
"""

import json
import logging

import httpx
import pytest

from conftest import BASE_URL_KEY, REMOTE_URL, RecordingTransport
from enrollment_client.app import EnrollmentApp
from enrollment_client.common.config import (
    ClientSettings,
    load_client_settings,
    load_settings_file,
)
from enrollment_client.common.logging_setup import JsonFormatter, get_service_logger, set_log_level
from enrollment_client.services.api.client import HttpClient
from enrollment_client.services.config.provider import (
    HttpRemoteConfigProvider,
    InMemoryRemoteConfigProvider,
)
from enrollment_client.services.config.registry import API_BASE_URL, DEFAULT_REGISTRY

DEFAULT_REGISTRY_URL = DEFAULT_REGISTRY.get(API_BASE_URL).default_value


def make_app(provider, transport=None):
    http_client = HttpClient(DEFAULT_REGISTRY_URL, transport=transport or RecordingTransport())
    return EnrollmentApp(provider=provider, http_client=http_client)


@pytest.mark.asyncio
async def test_app_starts_on_registry_default_before_bootstrap():
    app = make_app(InMemoryRemoteConfigProvider())

    assert app.http_client.effective_base_url() == DEFAULT_REGISTRY_URL
    assert app.state.read().api_base_url == DEFAULT_REGISTRY_URL
    assert app.get_status()["consistent"] is True


@pytest.mark.asyncio
async def test_app_context_manager_bootstraps_and_closes():
    provider = InMemoryRemoteConfigProvider({BASE_URL_KEY: REMOTE_URL})

    async with make_app(provider) as app:
        status = app.get_status()

    assert status["api_base_url"] == REMOTE_URL
    assert status["effective_base_url"] == REMOTE_URL
    assert status["is_loaded"] is True
    assert status["bootstrap_count"] == 1
    assert status["started_at"] is not None


@pytest.mark.asyncio
async def test_app_reset_http_client_reapplies_config():
    transport = RecordingTransport()
    app = make_app(InMemoryRemoteConfigProvider({BASE_URL_KEY: REMOTE_URL}), transport)
    await app.start()

    await app.reset_http_client()
    await app.http_client.get("/ping")

    assert str(transport.requests[-1].url) == f"{REMOTE_URL}/ping"
    await app.stop()


@pytest.mark.asyncio
async def test_app_use_defaults():
    app = make_app(InMemoryRemoteConfigProvider({BASE_URL_KEY: REMOTE_URL}))
    await app.start()

    app.use_defaults()

    assert app.get_status()["api_base_url"] == DEFAULT_REGISTRY_URL
    assert app.get_status()["is_loaded"] is False
    assert app.http_client.effective_base_url() == DEFAULT_REGISTRY_URL
    await app.stop()


@pytest.mark.asyncio
async def test_app_with_unreachable_template_falls_back():
    def offline(request):
        raise httpx.ConnectError("offline", request=request)

    provider = HttpRemoteConfigProvider(
        "https://config.example/template.json", transport=RecordingTransport(offline)
    )

    async with make_app(provider) as app:
        assert app.state.read().api_base_url == DEFAULT_REGISTRY_URL
        assert app.state.read().is_loaded is False
        assert app.synchronizer.is_consistent()


def test_app_builds_http_provider_from_settings(tmp_path):
    settings = load_client_settings({
        "remote_config": {
            "template_url": "https://config.example/template.json",
            "minimum_fetch_interval_s": 60,
            "cache_path": str(tmp_path / "cache.json"),
        },
        "api": {"timeout_s": 12},
    })

    app = EnrollmentApp(settings)

    assert isinstance(app.provider, HttpRemoteConfigProvider)
    assert app.provider.template_url == "https://config.example/template.json"
    assert app.provider.minimum_fetch_interval_s == 60
    assert app.provider.cache is not None
    assert app.http_client.timeout_s == 12.0


def test_settings_defaults():
    settings = ClientSettings()

    assert settings.api.timeout_s == 30.0
    assert settings.api.headers["Content-Type"] == "application/json"
    assert settings.remote_config.template_url == ""


def test_settings_file_roundtrip(tmp_path, monkeypatch):
    monkeypatch.delenv("ENROLLMENT_REMOTE_CONFIG_URL", raising=False)
    monkeypatch.delenv("ENROLLMENT_API_TIMEOUT_S", raising=False)
    path = tmp_path / "enrollment.yaml"
    path.write_text(
        "remote_config:\n"
        "  template_url: https://config.example/t.json\n"
        "api:\n"
        "  timeout_s: 5\n"
        "  headers:\n"
        "    X-Client: enrollment-app\n",
        encoding="utf-8",
    )

    settings = load_settings_file(path)

    assert settings.remote_config.template_url == "https://config.example/t.json"
    assert settings.api.timeout_s == 5.0
    assert settings.api.headers["X-Client"] == "enrollment-app"
    assert settings.api.headers["Accept"] == "application/json"


def test_settings_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("ENROLLMENT_REMOTE_CONFIG_URL", "https://env.example/t.json")
    monkeypatch.setenv("ENROLLMENT_API_TIMEOUT_S", "7.5")

    settings = load_settings_file(tmp_path / "missing.yaml")

    assert settings.remote_config.template_url == "https://env.example/t.json"
    assert settings.api.timeout_s == 7.5


def test_settings_invalid_yaml_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("ENROLLMENT_REMOTE_CONFIG_URL", raising=False)
    monkeypatch.delenv("ENROLLMENT_API_TIMEOUT_S", raising=False)
    path = tmp_path / "enrollment.yaml"
    path.write_text("remote_config: [unclosed", encoding="utf-8")

    settings = load_settings_file(path)

    assert settings.remote_config.template_url == ""
    assert settings.api.timeout_s == 30.0


def test_json_formatter_includes_service_and_extras():
    record = logging.LogRecord("enrollment.api", logging.INFO, __file__, 1, "hello", None, None)
    record.service = "api"
    record.url = "http://x"

    data = json.loads(JsonFormatter().format(record))

    assert data["service"] == "api"
    assert data["message"] == "hello"
    assert data["url"] == "http://x"


def test_set_log_level_applies_to_service_loggers():
    adapter = get_service_logger("test-level")

    set_log_level("DEBUG")
    assert adapter.logger.level == logging.DEBUG

    set_log_level("WARNING")
    assert adapter.logger.level == logging.WARNING
    set_log_level("INFO")


def test_json_formatter_drops_empty_extras_and_uses_record_time():
    record = logging.LogRecord("enrollment.api", logging.INFO, __file__, 1, "hello", None, None)
    record.created = 0.0
    record.payload = None

    data = json.loads(JsonFormatter().format(record))

    assert data["timestamp"] == "1970-01-01T00:00:00+00:00"
    assert "payload" not in data


def test_service_logger_is_cached_and_keeps_caller_extras():
    adapter = get_service_logger("test-cache")

    assert get_service_logger("test-cache") is adapter
    msg, kwargs = adapter.process("x", {"extra": {"url": "http://x"}})
    assert kwargs["extra"] == {"url": "http://x", "service": "test-cache"}
