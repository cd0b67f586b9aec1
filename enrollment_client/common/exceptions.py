"""
Custom Exception Classes for the Enrollment Client

Hierarchical exception structure for error handling across services.
Configuration errors are absorbed by the config synchronizer; API errors
always reach the caller of a request function.
"""

from typing import Any


class EnrollmentClientError(Exception):
    """Base exception for all enrollment client errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(EnrollmentClientError):
    """Configuration-related errors"""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(f"Config Error: {message}", recoverable)


class InvalidBaseUrlError(ConfigError):
    """Rejected base URL (missing, blank or not an absolute http(s) URL)"""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid base URL: {value!r}")


class ProviderError(ConfigError):
    """Remote config provider failure (network, timeout, bad template)"""

    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        super().__init__(f"Provider: {message}", recoverable=True)


class ApiError(EnrollmentClientError):
    """Base class for every failed API request"""

    user_message = "Something went wrong. Please try again."

    def __init__(
        self,
        message: str,
        method: str | None = None,
        url: str | None = None,
        status: int | None = None,
        body: Any = None,
        recoverable: bool = True,
    ):
        self.method = method
        self.url = url
        self.status = status
        self.body = body
        super().__init__(message, recoverable)


class ServiceUnreachableError(ApiError):
    """No response received (connection refused, DNS, network down)"""

    user_message = "Service unreachable. Please check your internet connection."


class RequestTimeoutError(ServiceUnreachableError):
    """Request did not complete within the client timeout"""

    user_message = "The request took too long to complete. Please try again."


class ClientResponseError(ApiError):
    """4xx response"""

    user_message = "The request was rejected by the server."


class NotFoundError(ClientResponseError):
    """404 response"""

    user_message = "Not found."


class ServerResponseError(ApiError):
    """5xx response"""

    user_message = "The server encountered an internal error. Please try again later."


class MalformedResponseError(ApiError):
    """Response body could not be decoded"""

    user_message = "The server sent an unexpected response."


def describe_api_error(error: Exception) -> str:
    """
    User-facing message for a request failure.

    Distinguishes "not found", "service unreachable" and
    "other server error" so the UI can react differently.
    """
    if isinstance(error, ApiError):
        return error.user_message
    return ApiError.user_message
