"""
Configuration Validator

Validates values resolved from the remote config provider before they
are accepted into shared state.
"""

from typing import Any

import httpx

from enrollment_client.common.logging_setup import get_service_logger

logger = get_service_logger("config.validator")

ALLOWED_SCHEMES = ("http", "https")


def _url_errors(value: Any) -> list[str]:
    if value is None:
        return ["Base URL is missing"]
    if not isinstance(value, str):
        return [f"Base URL must be a string, got {type(value).__name__}"]
    if not value.strip():
        return ["Base URL is empty"]

    try:
        url = httpx.URL(value.strip())
    except httpx.InvalidURL as e:
        return [f"Base URL cannot be parsed: {e}"]

    errors = []
    if url.scheme not in ALLOWED_SCHEMES:
        errors.append(f"Base URL scheme must be http or https, got {url.scheme!r}")
    if not url.host:
        errors.append("Base URL has no host")
    return errors


class ConfigValidator:
    """Validates resolved config values"""

    def validate_base_url(self, value: Any) -> tuple[bool, list[str]]:
        """
        Validate an API base URL.

        Args:
            value: Value read from the provider

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = _url_errors(value)
        is_valid = len(errors) == 0

        if not is_valid:
            logger.warning(
                f"Base URL validation failed: {errors}",
                extra={"errors": errors},
            )
        else:
            logger.debug("Base URL validation passed")

        return is_valid, errors


def is_valid_base_url(value: Any) -> bool:
    """Absolute http(s) URL check shared by the synchronizer and the HTTP client"""
    return not _url_errors(value)
