"""
Common Utilities

Shared modules used across all services:
- state.py - Shared config state (single writer, many readers)
- config.py - Settings dataclasses and YAML loading
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
"""

from .state import ConfigSnapshot, SharedConfigState
from .config import (
    ClientSettings,
    RemoteConfigSettings,
    ApiSettings,
    load_client_settings,
    load_settings_file,
)
from .exceptions import (
    EnrollmentClientError,
    ConfigError,
    InvalidBaseUrlError,
    ProviderError,
    ApiError,
    ServiceUnreachableError,
    RequestTimeoutError,
    ClientResponseError,
    NotFoundError,
    ServerResponseError,
    MalformedResponseError,
    describe_api_error,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    set_log_level,
    log_api_request,
    log_api_response,
    log_api_error,
)

__all__ = [
    # State
    "ConfigSnapshot",
    "SharedConfigState",
    # Settings
    "ClientSettings",
    "RemoteConfigSettings",
    "ApiSettings",
    "load_client_settings",
    "load_settings_file",
    # Exceptions
    "EnrollmentClientError",
    "ConfigError",
    "InvalidBaseUrlError",
    "ProviderError",
    "ApiError",
    "ServiceUnreachableError",
    "RequestTimeoutError",
    "ClientResponseError",
    "NotFoundError",
    "ServerResponseError",
    "MalformedResponseError",
    "describe_api_error",
    # Logging
    "setup_logging",
    "get_service_logger",
    "set_log_level",
    "log_api_request",
    "log_api_response",
    "log_api_error",
]
