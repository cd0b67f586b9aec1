"""
Remote Config Providers

A remote config provider serves typed values by key. It holds three
layers: in-app defaults, the last fetched remote template, and the
activated snapshot that get_value() reads from.

Providers:
- InMemoryRemoteConfigProvider: remote values held in memory (offline
  builds, local development)
- HttpRemoteConfigProvider: fetches the remote template over HTTP and
  caches the activated snapshot on disk
"""

import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from enrollment_client.common.exceptions import ProviderError
from enrollment_client.common.logging_setup import get_service_logger

from .cache import RemoteConfigCache

logger = get_service_logger("config.provider")

# Value sources
SOURCE_REMOTE = "remote"
SOURCE_DEFAULT = "default"
SOURCE_STATIC = "static"

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True)
class ConfigValue:
    """A value read from the provider, with where it came from"""
    value: str
    source: str = SOURCE_STATIC

    def as_string(self) -> str:
        return self.value

    def as_number(self) -> float:
        try:
            return float(self.value)
        except (TypeError, ValueError):
            return 0.0

    def as_bool(self) -> bool:
        return str(self.value).strip().lower() in _TRUTHY


@runtime_checkable
class RemoteConfigProvider(Protocol):
    """Contract the config synchronizer relies on"""

    async def set_defaults(self, defaults: dict[str, str]) -> None: ...

    async def fetch_and_activate(self) -> bool: ...

    def get_value(self, key: str) -> ConfigValue: ...

    def get_all(self) -> dict[str, ConfigValue]: ...


class _LayeredValues:
    """Defaults + activated snapshot lookup shared by the providers"""

    def __init__(self) -> None:
        self._defaults: dict[str, str] = {}
        self._active: dict[str, str] = {}

    async def set_defaults(self, defaults: dict[str, str]) -> None:
        self._defaults = {str(k): str(v) for k, v in defaults.items()}

    def get_value(self, key: str) -> ConfigValue:
        if key in self._active:
            return ConfigValue(self._active[key], SOURCE_REMOTE)
        if key in self._defaults:
            return ConfigValue(self._defaults[key], SOURCE_DEFAULT)
        return ConfigValue("", SOURCE_STATIC)

    def get_all(self) -> dict[str, ConfigValue]:
        keys = set(self._defaults) | set(self._active)
        return {key: self.get_value(key) for key in sorted(keys)}

    def _activate(self, entries: dict[str, str]) -> bool:
        """Make entries the active snapshot. Returns True if anything changed."""
        changed = entries != self._active
        self._active = dict(entries)
        return changed


class InMemoryRemoteConfigProvider(_LayeredValues):
    """
    Provider backed by an in-memory remote template.

    publish() replaces the remote template; the next fetch_and_activate()
    makes it visible.
    """

    def __init__(self, remote_values: dict[str, str] | None = None):
        super().__init__()
        self._remote: dict[str, str] = dict(remote_values or {})

    def publish(self, remote_values: dict[str, str]) -> None:
        self._remote = dict(remote_values)

    async def fetch_and_activate(self) -> bool:
        activated = self._activate(self._remote)
        if activated:
            logger.info("Remote config: new values activated")
        else:
            logger.info("Remote config: using cached or default values")
        return activated


class HttpRemoteConfigProvider(_LayeredValues):
    """
    Provider that fetches a JSON template over HTTP.

    Expected template body:
        {"state": "UPDATE", "entries": {"ES_001": "https://..."}}

    state "NO_CHANGE" keeps the active snapshot; "NO_TEMPLATE" and
    "EMPTY_CONFIG" activate an empty snapshot.
    """

    def __init__(
        self,
        template_url: str,
        minimum_fetch_interval_s: float = 0,
        timeout_s: float = 10.0,
        cache: RemoteConfigCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__()
        self.template_url = template_url
        self.minimum_fetch_interval_s = minimum_fetch_interval_s
        self.timeout_s = timeout_s
        self.cache = cache
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._last_fetch_monotonic: float | None = None

        # Serve the last activated snapshot until a fetch succeeds
        if self.cache:
            cached = self.cache.load()
            if cached:
                self._active = cached
                logger.info(f"Loaded remote config from cache ({len(cached)} keys)")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_s,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _throttled(self) -> bool:
        if self._last_fetch_monotonic is None or self.minimum_fetch_interval_s <= 0:
            return False
        age = time.monotonic() - self._last_fetch_monotonic
        return age < self.minimum_fetch_interval_s

    async def fetch_and_activate(self) -> bool:
        """
        Fetch the remote template and activate it.

        Returns:
            True if a new snapshot was activated

        Raises:
            ProviderError: network failure, bad status or malformed template
        """
        if not self.template_url:
            logger.debug("No remote template URL configured, using defaults")
            return False

        if self._throttled():
            logger.debug("Remote config fetch throttled, using cached values")
            return False

        entries = await self._fetch_template()
        self._last_fetch_monotonic = time.monotonic()

        if entries is None:
            logger.info("Remote config: no changes on server")
            return False

        activated = self._activate(entries)
        if activated:
            logger.info(f"Remote config: new values activated ({len(entries)} keys)")
            if self.cache:
                try:
                    self.cache.save(entries)
                except OSError as e:
                    logger.error(f"Failed to cache remote config: {e}")
        else:
            logger.info("Remote config: using cached or default values")

        return activated

    async def _fetch_template(self) -> dict[str, str] | None:
        """Returns entries, or None when the server reports NO_CHANGE"""
        try:
            client = await self._get_client()
            response = await client.get(self.template_url)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            raise ProviderError(f"Timed out fetching template: {e}", "fetch") from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Template fetch returned {e.response.status_code}", "fetch"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Failed to fetch template: {e}", "fetch") from e
        except ValueError as e:
            raise ProviderError(f"Template is not valid JSON: {e}", "fetch") from e

        if not isinstance(body, dict):
            raise ProviderError("Template must be a JSON object", "fetch")

        state = body.get("state", "UPDATE")
        if state == "NO_CHANGE":
            return None
        if state in ("NO_TEMPLATE", "EMPTY_CONFIG"):
            return {}

        entries = body.get("entries", {})
        if not isinstance(entries, dict):
            raise ProviderError("Template entries must be an object", "fetch")

        return {str(k): str(v) for k, v in entries.items() if v is not None}
