"""
Config Synchronizer

Resolves the API base URL from the remote config provider and makes
shared state and the HTTP client agree on it.

bootstrap():
1. Push registry defaults into the provider
2. Fetch and activate the remote template
3. Read the API base URL
4. Accept it if it is a non-empty string, otherwise use the registry default
5. Write the resolved snapshot into shared state
6. Push the resolved URL into the HTTP client

Provider failures degrade to the registry default and are never raised.
Concurrent bootstraps are not serialized: the last one to finish wins.
"""

from datetime import datetime, timezone
from typing import Protocol

from enrollment_client.common.exceptions import ConfigError
from enrollment_client.common.logging_setup import get_service_logger
from enrollment_client.common.state import ConfigSnapshot, SharedConfigState

from .provider import RemoteConfigProvider, SOURCE_REMOTE
from .registry import API_BASE_URL, ConfigKeyRegistry, DEFAULT_REGISTRY
from .validator import ConfigValidator

logger = get_service_logger("config.sync")


class BaseUrlTarget(Protocol):
    """Anything whose base URL follows shared state (the HTTP client)"""

    def set_base_url(self, url: str) -> None: ...

    def effective_base_url(self) -> str: ...


class ConfigSynchronizer:
    """
    Owns the bootstrap sequence.

    One instance per process, constructed explicitly and passed to
    whoever needs it.
    """

    def __init__(
        self,
        provider: RemoteConfigProvider,
        state: SharedConfigState,
        http_client: BaseUrlTarget,
        registry: ConfigKeyRegistry = DEFAULT_REGISTRY,
        validator: ConfigValidator | None = None,
    ):
        self.provider = provider
        self.state = state
        self.http_client = http_client
        self.registry = registry
        self.validator = validator or ConfigValidator()

        self._bootstrap_count = 0

    @property
    def bootstrap_count(self) -> int:
        return self._bootstrap_count

    async def bootstrap(self) -> ConfigSnapshot:
        """
        Resolve the base URL and propagate it.

        Returns:
            The snapshot this call wrote into shared state
        """
        entry = self.registry.get(API_BASE_URL)
        resolved_url = entry.default_value
        from_provider = False

        # 1. Defaults, so a provider with no stored value still returns a sane string
        try:
            await self.provider.set_defaults(self.registry.defaults())
        except Exception as e:
            logger.warning(f"Failed to set remote config defaults: {e}")

        # 2. Fetch and activate
        try:
            fetched = await self.provider.fetch_and_activate()
            if fetched:
                logger.info("Remote config: new configs fetched and activated")
            else:
                logger.info("Remote config: using cached or default values")
        except Exception as e:
            logger.error(f"Failed to fetch remote config: {e}")

        # 3-4. Read and validate
        try:
            value = self.provider.get_value(entry.provider_key)
            candidate = value.as_string()
            is_valid, errors = self.validator.validate_base_url(candidate)
            if is_valid:
                resolved_url = candidate.strip()
                from_provider = value.source == SOURCE_REMOTE
            else:
                logger.warning(
                    f"Ignoring remote value for {entry.provider_key}: {errors}",
                    extra={"provider_key": entry.provider_key},
                )
        except Exception as e:
            logger.error(f"Failed to read {entry.provider_key} from remote config: {e}")

        # 5. Whole-snapshot write
        snapshot = ConfigSnapshot(
            api_base_url=resolved_url,
            is_loaded=from_provider,
            last_fetched_at=datetime.now(timezone.utc),
        )
        self.state.write(snapshot)
        self._bootstrap_count += 1

        # 6. Project into the HTTP client
        self._apply(snapshot.api_base_url)

        logger.info(
            f"API base URL resolved: {resolved_url} "
            f"({'remote' if from_provider else 'default'})",
            extra={"api_base_url": resolved_url, "is_loaded": from_provider},
        )
        return snapshot

    def resync(self) -> None:
        """Re-apply the current shared state URL to the HTTP client (no fetch)"""
        self._apply(self.state.read().api_base_url)

    def use_defaults(self) -> None:
        """Drop any resolved value and run on the registry default"""
        self.state.reset()
        self.resync()
        logger.info("Config reset to defaults")

    def is_consistent(self) -> bool:
        """True when the HTTP client points at the shared state URL"""
        return self.http_client.effective_base_url() == self.state.read().api_base_url

    def get_all_config(self) -> dict[str, str]:
        """
        Every known remote config value as a string.

        Falls back to registry defaults if the provider cannot be read.
        """
        config = self.registry.defaults()
        try:
            for key, value in self.provider.get_all().items():
                config[key] = value.as_string()
        except Exception as e:
            logger.warning(f"Failed to read all remote config values: {e}")

        logger.debug("Remote config values", extra={"config": config})
        return config

    def _apply(self, url: str) -> None:
        try:
            self.http_client.set_base_url(url)
        except ConfigError as e:
            # Shared state only ever holds validated URLs
            logger.error(f"HTTP client rejected base URL {url!r}: {e}")
