"""
Config Key Registry

Fixed mapping from logical setting names to remote config keys and their
bundled default values.
"""

from dataclasses import dataclass
from typing import Iterator

from enrollment_client.common.exceptions import ConfigError

# Logical names
API_BASE_URL = "API base URL"


@dataclass(frozen=True)
class ConfigKey:
    """Registry entry"""
    logical_name: str
    provider_key: str
    default_value: str


class ConfigKeyRegistry:
    """
    Immutable set of config keys.

    Every logical name and every provider key appears exactly once.
    """

    def __init__(self, entries: list[ConfigKey]):
        by_name: dict[str, ConfigKey] = {}
        provider_keys: set[str] = set()

        for entry in entries:
            if entry.logical_name in by_name:
                raise ConfigError(f"Duplicate logical name: {entry.logical_name}")
            if entry.provider_key in provider_keys:
                raise ConfigError(f"Duplicate provider key: {entry.provider_key}")
            by_name[entry.logical_name] = entry
            provider_keys.add(entry.provider_key)

        self._entries = by_name

    def get(self, logical_name: str) -> ConfigKey:
        try:
            return self._entries[logical_name]
        except KeyError:
            raise ConfigError(f"Unknown config key: {logical_name}") from None

    def defaults(self) -> dict[str, str]:
        """Provider key -> default value, as pushed into the provider"""
        return {e.provider_key: e.default_value for e in self._entries.values()}

    def __iter__(self) -> Iterator[ConfigKey]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, logical_name: object) -> bool:
        return logical_name in self._entries


DEFAULT_REGISTRY = ConfigKeyRegistry([
    ConfigKey(
        logical_name=API_BASE_URL,
        provider_key="ES_001",
        default_value="http://10.65.21.106:8000/api/v1",
    ),
])
