"""
Structured Logging Setup

Every module logs through get_service_logger(), which hands out an
adapter on the "enrollment.<service>" logger. Output goes to stderr so
the CLI can keep stdout for its JSON status document.

Environment:
- ENROLLMENT_LOG_LEVEL: DEBUG, INFO (default), WARNING, ERROR
- ENROLLMENT_LOG_FORMAT: json (default) or text
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

LOGGER_NAMESPACE = "enrollment"

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "service", "taskName"}

_adapters: dict[str, "ServiceLoggerAdapter"] = {}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extras flattened into it"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and value is not None:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Stamps the service name on every record, keeping caller extras"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**kwargs.get("extra", {}), "service": self.extra["service"]}
        return msg, kwargs


def _level(log_level: str) -> int:
    return getattr(logging, str(log_level).upper(), logging.INFO)


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> logging.Logger:
    """
    Configure the enrollment.<service_name> logger.

    Calling it again for the same service replaces the handler, so level
    and format changes take effect.
    """
    level = _level(log_level)

    logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{service_name}")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        JsonFormatter() if json_format
        else logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """Adapter for service_name, configured from the environment on first use"""
    adapter = _adapters.get(service_name)
    if adapter is None:
        logger = setup_logging(
            service_name,
            os.environ.get("ENROLLMENT_LOG_LEVEL", "INFO"),
            os.environ.get("ENROLLMENT_LOG_FORMAT", "json").lower() == "json",
        )
        adapter = ServiceLoggerAdapter(logger, {"service": service_name})
        _adapters[service_name] = adapter
    return adapter


def set_log_level(log_level: str) -> None:
    """Change the level of every service logger handed out so far"""
    level = _level(log_level)
    for adapter in _adapters.values():
        adapter.logger.setLevel(level)
        for handler in adapter.logger.handlers:
            handler.setLevel(level)


# API traffic
def log_api_request(
    logger: logging.LoggerAdapter,
    method: str,
    url: str,
    payload: Any = None,
) -> None:
    logger.debug(
        f"API request: {method} {url}",
        extra={"method": method, "url": url, "payload": payload},
    )


def log_api_response(
    logger: logging.LoggerAdapter,
    method: str,
    url: str,
    status: int,
    payload: Any = None,
) -> None:
    """Debug for success, warning for 4xx/5xx"""
    log_method = logger.debug if status < 400 else logger.warning
    log_method(
        f"API response: {method} {url} -> {status}",
        extra={"method": method, "url": url, "status": status, "payload": payload},
    )


def log_api_error(
    logger: logging.LoggerAdapter,
    method: str,
    url: str,
    error: str,
) -> None:
    """Request that never produced a response"""
    logger.error(
        f"API error: {method} {url}: {error}",
        extra={"method": method, "url": url, "error": error},
    )
