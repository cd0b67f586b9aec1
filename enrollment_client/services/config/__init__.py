"""
Config Service - Remote Configuration Bootstrap

Responsibilities:
- Seed the remote config provider with bundled defaults
- Fetch and activate the remote template
- Resolve the API base URL with fallback to the bundled default
- Keep shared state and the HTTP client pointed at the same URL
"""

from .cache import RemoteConfigCache
from .provider import (
    ConfigValue,
    RemoteConfigProvider,
    InMemoryRemoteConfigProvider,
    HttpRemoteConfigProvider,
)
from .registry import API_BASE_URL, ConfigKey, ConfigKeyRegistry, DEFAULT_REGISTRY
from .synchronizer import ConfigSynchronizer
from .validator import ConfigValidator

__all__ = [
    "RemoteConfigCache",
    "ConfigValue",
    "RemoteConfigProvider",
    "InMemoryRemoteConfigProvider",
    "HttpRemoteConfigProvider",
    "API_BASE_URL",
    "ConfigKey",
    "ConfigKeyRegistry",
    "DEFAULT_REGISTRY",
    "ConfigSynchronizer",
    "ConfigValidator",
]
