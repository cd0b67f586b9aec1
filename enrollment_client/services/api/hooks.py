"""
Request Logging Hooks

Pluggable observer for API traffic. The HTTP client calls it before each
request is sent and when each response (or transport failure) arrives.
Logging is for observability only and never affects request outcome.
"""

import json
from typing import Any, Protocol

from enrollment_client.common.logging_setup import (
    get_service_logger,
    log_api_request,
    log_api_response,
    log_api_error,
)

# Base64 images make payloads large; keep logs readable
MAX_LOGGED_PAYLOAD_CHARS = 1000


class RequestLogger(Protocol):
    def log_request(self, method: str, url: str, payload: Any) -> None: ...

    def log_response(self, method: str, url: str, status: int, payload: Any) -> None: ...

    def log_error(self, method: str, url: str, error: Exception) -> None: ...


def render_payload(content: bytes | None) -> Any:
    """Decode a request/response body for logging"""
    if not content:
        return None

    text = content.decode("utf-8", errors="replace")
    if len(text) > MAX_LOGGED_PAYLOAD_CHARS:
        return text[:MAX_LOGGED_PAYLOAD_CHARS] + f"... ({len(text)} chars)"

    try:
        return json.loads(text)
    except ValueError:
        return text


class LoggingRequestLogger:
    """RequestLogger writing to the structured "api" service logger"""

    def __init__(self, log_payloads: bool = True):
        self.log_payloads = log_payloads
        self.logger = get_service_logger("api")

    def log_request(self, method: str, url: str, payload: Any) -> None:
        log_api_request(self.logger, method, url, payload if self.log_payloads else None)

    def log_response(self, method: str, url: str, status: int, payload: Any) -> None:
        log_api_response(
            self.logger, method, url, status, payload if self.log_payloads else None
        )

    def log_error(self, method: str, url: str, error: Exception) -> None:
        log_api_error(self.logger, method, url, f"{type(error).__name__}: {error}")
