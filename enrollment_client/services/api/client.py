"""
API Client

Long-lived HTTP client for the enrollment backend.

The base URL is mutable after construction: the config synchronizer
pushes the resolved URL in through set_base_url(). Every request uses
whatever base URL is current when it is built; requests already in
flight keep the URL they were dispatched with.

Failures are raised as typed ApiError subclasses and never retried.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx

from enrollment_client.common.exceptions import (
    ApiError,
    ClientResponseError,
    InvalidBaseUrlError,
    MalformedResponseError,
    NotFoundError,
    RequestTimeoutError,
    ServerResponseError,
    ServiceUnreachableError,
)
from enrollment_client.common.logging_setup import get_service_logger
from enrollment_client.services.config.validator import is_valid_base_url

from .hooks import RequestLogger, render_payload
from .responses import decode_body, decode_json_body, summarize_error_body

logger = get_service_logger("api.client")

DEFAULT_TIMEOUT_S = 30.0


@dataclass
class ApiResponse:
    """Successful response"""
    status: int
    data: Any
    headers: dict[str, str] = field(default_factory=dict)


class HttpClient:
    """
    Request-issuing object whose base URL follows shared config state.

    Reuses a single httpx.AsyncClient; close() or reset() drop it and the
    next request creates a fresh one with the current base URL.
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        headers: dict[str, str] | None = None,
        request_logger: RequestLogger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not is_valid_base_url(base_url):
            raise InvalidBaseUrlError(base_url)

        self._initial_base_url = base_url
        self._base_url = base_url
        self.timeout_s = timeout_s
        self.default_headers = dict(headers or {})
        self.request_logger = request_logger
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    # Base URL management

    def effective_base_url(self) -> str:
        """Base URL the next request will use"""
        return self._base_url

    def set_base_url(self, url: str) -> None:
        """
        Replace the base URL for every request issued after this returns.

        Raises:
            InvalidBaseUrlError: url is not an absolute http(s) URL;
                the previous base URL stays in effect
        """
        if not is_valid_base_url(url):
            raise InvalidBaseUrlError(url)
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise InvalidBaseUrlError(url) from e

        previous = self._base_url
        if self._client is not None and not self._client.is_closed:
            self._client.base_url = parsed
        self._base_url = url

        if previous != url:
            logger.info(
                f"API base URL changed: {previous} → {url}",
                extra={"old_base_url": previous, "new_base_url": url},
            )

    async def reset(self) -> None:
        """Drop the underlying client and return to the construction-time base URL"""
        await self.close()
        self._base_url = self._initial_base_url
        logger.info(f"HTTP client reset (base URL: {self._base_url})")

    # Lifecycle

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            event_hooks = {}
            if self.request_logger is not None:
                event_hooks = {
                    "request": [self._on_request],
                    "response": [self._on_response],
                }
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self.timeout_s,
                headers=self.default_headers,
                event_hooks=event_hooks,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Observability hooks

    async def _on_request(self, request: httpx.Request) -> None:
        try:
            self.request_logger.log_request(
                request.method, str(request.url), render_payload(request.content)
            )
        except Exception as e:
            logger.debug(f"Request logger failed: {e}")

    async def _on_response(self, response: httpx.Response) -> None:
        await response.aread()
        try:
            self.request_logger.log_response(
                response.request.method,
                str(response.request.url),
                response.status_code,
                render_payload(response.content),
            )
        except Exception as e:
            logger.debug(f"Response logger failed: {e}")

    # Requests

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResponse:
        """
        Issue a request against the current base URL.

        Raises:
            RequestTimeoutError: no response within the client timeout
            ServiceUnreachableError: connection failure, no response
            NotFoundError / ClientResponseError: 4xx response
            ServerResponseError: 5xx response
            MalformedResponseError: success response body is not JSON
        """
        method = method.upper()
        client = await self._get_client()
        url = f"{self._base_url.rstrip('/')}/{path.lstrip('/')}"

        try:
            response = await client.request(
                method,
                path,
                json=json,
                params=params,
                files=files,
                data=data,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            self._log_failure(method, url, e)
            raise RequestTimeoutError(
                f"Request timed out after {self.timeout_s}s: {method} {url}",
                method=method,
                url=url,
            ) from e
        except httpx.DecodingError as e:
            raise MalformedResponseError(
                f"Could not decode response: {e}", method=method, url=url
            ) from e
        except httpx.TransportError as e:
            self._log_failure(method, url, e)
            raise ServiceUnreachableError(
                f"No response from {url}: {e}", method=method, url=url
            ) from e

        url = str(response.request.url)
        status = response.status_code

        if status >= 400:
            raise self._error_for_status(method, url, response)

        try:
            body = decode_json_body(response)
        except ValueError as e:
            raise MalformedResponseError(
                f"Response body is not valid JSON: {e}",
                method=method,
                url=url,
                status=status,
                body=response.text,
            ) from e

        return ApiResponse(status=status, data=body, headers=dict(response.headers))

    async def get(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, json: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, json: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", path, **kwargs)

    def _log_failure(self, method: str, url: str, error: Exception) -> None:
        if self.request_logger is None:
            return
        try:
            self.request_logger.log_error(method, url, error)
        except Exception as e:
            logger.debug(f"Request logger failed: {e}")

    @staticmethod
    def _error_for_status(method: str, url: str, response: httpx.Response) -> ApiError:
        status = response.status_code
        try:
            body = decode_body(response)
        except ValueError:
            body = response.text

        message = f"{method} {url} returned {status}: {summarize_error_body(body, status)}"

        if status == 404:
            return NotFoundError(message, method=method, url=url, status=status, body=body)
        if status < 500:
            return ClientResponseError(message, method=method, url=url, status=status, body=body)
        return ServerResponseError(message, method=method, url=url, status=status, body=body)
