"""
Shared test fixtures.
"""

import httpx
import pytest

from enrollment_client.common.state import SharedConfigState
from enrollment_client.services.api.client import HttpClient
from enrollment_client.services.config.provider import InMemoryRemoteConfigProvider
from enrollment_client.services.config.registry import (
    API_BASE_URL,
    ConfigKey,
    ConfigKeyRegistry,
)
from enrollment_client.services.config.synchronizer import ConfigSynchronizer

DEFAULT_URL = "http://default.example/api/v1"
REMOTE_URL = "http://remote.example/api/v1"
BASE_URL_KEY = "ES_001"


class RecordingTransport(httpx.AsyncBaseTransport):
    """Mock transport that records requests and answers via a handler"""

    def __init__(self, handler=None):
        self.handler = handler or (lambda request: httpx.Response(200, json={}))
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.handler(request)
        if hasattr(result, "__await__"):
            result = await result
        return result


class RecordingRequestLogger:
    """RequestLogger that keeps every call"""

    def __init__(self):
        self.requests = []
        self.responses = []
        self.errors = []

    def log_request(self, method, url, payload):
        self.requests.append((method, url, payload))

    def log_response(self, method, url, status, payload):
        self.responses.append((method, url, status, payload))

    def log_error(self, method, url, error):
        self.errors.append((method, url, error))


@pytest.fixture
def registry():
    return ConfigKeyRegistry([
        ConfigKey(
            logical_name=API_BASE_URL,
            provider_key=BASE_URL_KEY,
            default_value=DEFAULT_URL,
        ),
    ])


@pytest.fixture
def state():
    return SharedConfigState(DEFAULT_URL)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def request_logger():
    return RecordingRequestLogger()


@pytest.fixture
async def http_client(transport, request_logger):
    client = HttpClient(
        base_url=DEFAULT_URL,
        timeout_s=5.0,
        headers={"Content-Type": "application/json", "Accept": "application/json"},
        request_logger=request_logger,
        transport=transport,
    )
    yield client
    await client.close()


@pytest.fixture
def provider():
    return InMemoryRemoteConfigProvider()


@pytest.fixture
def synchronizer(provider, state, http_client, registry):
    return ConfigSynchronizer(
        provider=provider,
        state=state,
        http_client=http_client,
        registry=registry,
    )
