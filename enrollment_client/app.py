"""
Enrollment App - Component Wiring

Builds the config key registry, shared state, remote config provider,
HTTP client and config synchronizer, and hands them to each other
explicitly. There are no module-level singletons: one EnrollmentApp is
one logical instance of the client.

Usage:
    async with EnrollmentApp(settings) as app:
        lookup = await check_user_exists(app.http_client, "123456")
"""

from datetime import datetime, timezone

from enrollment_client.common.config import ClientSettings
from enrollment_client.common.logging_setup import get_service_logger
from enrollment_client.common.state import ConfigSnapshot, SharedConfigState
from enrollment_client.services.api.client import HttpClient
from enrollment_client.services.api.hooks import LoggingRequestLogger, RequestLogger
from enrollment_client.services.config.cache import RemoteConfigCache
from enrollment_client.services.config.provider import (
    HttpRemoteConfigProvider,
    RemoteConfigProvider,
)
from enrollment_client.services.config.registry import (
    API_BASE_URL,
    ConfigKeyRegistry,
    DEFAULT_REGISTRY,
)
from enrollment_client.services.config.synchronizer import ConfigSynchronizer

logger = get_service_logger("app")


def build_provider(settings: ClientSettings) -> HttpRemoteConfigProvider:
    """Remote config provider from settings"""
    remote = settings.remote_config
    cache = RemoteConfigCache(remote.cache_path) if remote.cache_path else None
    return HttpRemoteConfigProvider(
        template_url=remote.template_url,
        minimum_fetch_interval_s=remote.minimum_fetch_interval_s,
        timeout_s=remote.timeout_s,
        cache=cache,
    )


class EnrollmentApp:
    """
    Client application container.

    Before start() completes, requests go to the registry default URL.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        provider: RemoteConfigProvider | None = None,
        registry: ConfigKeyRegistry = DEFAULT_REGISTRY,
        request_logger: RequestLogger | None = None,
        http_client: HttpClient | None = None,
    ):
        self.settings = settings or ClientSettings()
        self.registry = registry

        default_url = registry.get(API_BASE_URL).default_value

        self.state = SharedConfigState(default_url)
        self.provider = provider or build_provider(self.settings)
        self.http_client = http_client or HttpClient(
            base_url=default_url,
            timeout_s=self.settings.api.timeout_s,
            headers=self.settings.api.headers,
            request_logger=request_logger or LoggingRequestLogger(
                log_payloads=self.settings.api.log_payloads
            ),
        )
        self.synchronizer = ConfigSynchronizer(
            provider=self.provider,
            state=self.state,
            http_client=self.http_client,
            registry=registry,
        )

        self._started_at: datetime | None = None

    async def start(self) -> ConfigSnapshot:
        """Bootstrap remote config. Never raises on provider failure."""
        logger.info("Starting enrollment client")
        self._started_at = datetime.now(timezone.utc)
        snapshot = await self.synchronizer.bootstrap()
        logger.info(
            f"Enrollment client ready (API: {snapshot.api_base_url})",
            extra=snapshot.to_dict(),
        )
        return snapshot

    def refresh(self) -> None:
        """Re-point the HTTP client at shared state without fetching"""
        self.synchronizer.resync()

    async def reset_http_client(self) -> None:
        """Recreate the HTTP client's connection pool and re-apply config"""
        await self.http_client.reset()
        self.synchronizer.resync()

    def use_defaults(self) -> None:
        self.synchronizer.use_defaults()

    async def stop(self) -> None:
        """Close network clients"""
        await self.http_client.close()
        close = getattr(self.provider, "close", None)
        if close is not None:
            await close()
        logger.info("Enrollment client stopped")

    def get_status(self) -> dict:
        """Current config status for diagnostics"""
        snapshot = self.state.read()
        return {
            **snapshot.to_dict(),
            "effective_base_url": self.http_client.effective_base_url(),
            "consistent": self.synchronizer.is_consistent(),
            "bootstrap_count": self.synchronizer.bootstrap_count,
            "started_at": self._started_at.isoformat() if self._started_at else None,
        }

    async def __aenter__(self) -> "EnrollmentApp":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
