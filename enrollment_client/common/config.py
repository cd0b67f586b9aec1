"""
Configuration Dataclasses

Type-safe local settings for the client.
Loaded from a YAML file with environment variable overrides.

The API base URL is intentionally absent: it comes from the remote config
provider, with the config key registry holding its only static default.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .logging_setup import get_service_logger

logger = get_service_logger("settings")


def _default_headers() -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


@dataclass
class RemoteConfigSettings:
    """Remote config provider settings"""
    template_url: str = ""  # Empty = serve defaults only
    minimum_fetch_interval_s: int = 0
    timeout_s: float = 10.0
    cache_path: str | None = None


@dataclass
class ApiSettings:
    """HTTP client settings"""
    timeout_s: float = 30.0
    headers: dict[str, str] = field(default_factory=_default_headers)
    log_payloads: bool = True


@dataclass
class ClientSettings:
    """Complete client settings"""
    remote_config: RemoteConfigSettings = field(default_factory=RemoteConfigSettings)
    api: ApiSettings = field(default_factory=ApiSettings)
    log_level: str = "INFO"


def load_client_settings(data: dict) -> ClientSettings:
    """Load ClientSettings from dictionary (e.g., from YAML file)"""
    remote_data = data.get("remote_config") or {}
    remote_config = RemoteConfigSettings(
        template_url=remote_data.get("template_url", ""),
        minimum_fetch_interval_s=int(remote_data.get("minimum_fetch_interval_s", 0)),
        timeout_s=float(remote_data.get("timeout_s", 10.0)),
        cache_path=remote_data.get("cache_path"),
    )

    api_data = data.get("api") or {}
    headers = _default_headers()
    headers.update(api_data.get("headers") or {})
    api = ApiSettings(
        timeout_s=float(api_data.get("timeout_s", 30.0)),
        headers=headers,
        log_payloads=bool(api_data.get("log_payloads", True)),
    )

    settings = ClientSettings(
        remote_config=remote_config,
        api=api,
        log_level=data.get("log_level", "INFO"),
    )
    return apply_env_overrides(settings)


def apply_env_overrides(settings: ClientSettings) -> ClientSettings:
    """Apply ENROLLMENT_* environment variables on top of file settings"""
    template_url = os.environ.get("ENROLLMENT_REMOTE_CONFIG_URL")
    if template_url:
        settings.remote_config.template_url = template_url

    cache_path = os.environ.get("ENROLLMENT_REMOTE_CONFIG_CACHE")
    if cache_path:
        settings.remote_config.cache_path = cache_path

    timeout = os.environ.get("ENROLLMENT_API_TIMEOUT_S")
    if timeout:
        try:
            settings.api.timeout_s = float(timeout)
        except ValueError:
            logger.warning(f"Ignoring invalid ENROLLMENT_API_TIMEOUT_S: {timeout!r}")

    log_level = os.environ.get("ENROLLMENT_LOG_LEVEL")
    if log_level:
        settings.log_level = log_level

    return settings


def find_settings_path() -> Path:
    """Find settings file"""
    possible_paths = [
        Path(os.environ.get("ENROLLMENT_CONFIG", "enrollment.yaml")),
        Path.home() / ".config" / "enrollment-client" / "enrollment.yaml",
        Path("/etc/enrollment-client/enrollment.yaml"),
    ]

    for path in possible_paths:
        if path.exists():
            return path

    return possible_paths[0]


def load_settings_file(path: str | Path | None = None) -> ClientSettings:
    """
    Load settings from a YAML file.

    A missing or unparseable file yields default settings.
    """
    settings_path = Path(path) if path else find_settings_path()

    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Settings file not found: {settings_path}")
        data = {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing settings: {e}")
        data = {}

    if not isinstance(data, dict):
        logger.error(f"Settings file must contain a mapping: {settings_path}")
        data = {}

    return load_client_settings(data)
