"""
Response Body Helpers

Decoding of response bodies and short human-readable summaries of error
bodies. Some gateways answer with full HTML error pages instead of JSON;
those are reduced to their title and main heading.
"""

import re
from typing import Any

import httpx

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"

_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_H1_RE = re.compile(r"<h1[^>]*>([^<]+)</h1>", re.IGNORECASE)
_H2_RE = re.compile(r"<h2[^>]*>([^<]+)</h2>", re.IGNORECASE)
_ERROR_CLASS_RE = re.compile(
    r'<(?:p|div)[^>]*class="[^"]*error[^"]*"[^>]*>([^<]+)</(?:p|div)>',
    re.IGNORECASE,
)
_BODY_RE = re.compile(r"<body[^>]*>([\s\S]*?)</body>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def decode_body(response: httpx.Response) -> Any:
    """
    JSON body if it parses, otherwise text, None if empty.

    Raises:
        ValueError: body looks like JSON (content-type) but does not parse
    """
    if not response.content:
        return None

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.json()

    try:
        return response.json()
    except ValueError:
        return response.text


def decode_json_body(response: httpx.Response) -> Any:
    """
    Parsed JSON body, None if empty. Any JSON value is accepted.

    Raises:
        ValueError: body is not JSON
    """
    if not response.content:
        return None
    return response.json()


def is_html(body: Any) -> bool:
    if not isinstance(body, str):
        return False
    stripped = body.strip()
    return (
        stripped.lower().startswith("<!doctype")
        or stripped.lower().startswith("<html")
        or "<html" in body
        or "<body" in body
    )


def parse_html_error(html: str) -> tuple[str, str]:
    """
    Pull a title and message out of an HTML error page.

    Returns:
        (title, message)
    """
    title = "Server Error"
    message = DEFAULT_ERROR_MESSAGE

    match = _TITLE_RE.search(html)
    if match:
        title = match.group(1).strip()

    match = _H1_RE.search(html) or _H2_RE.search(html)
    if match:
        message = match.group(1).strip()

    match = _ERROR_CLASS_RE.search(html)
    if match:
        message = match.group(1).strip()

    if message == DEFAULT_ERROR_MESSAGE:
        match = _BODY_RE.search(html)
        if match:
            plain = _WS_RE.sub(" ", _TAG_RE.sub(" ", match.group(1))).strip()
            if 0 < len(plain) < 200:
                message = plain

    return title, message


def summarize_error_body(body: Any, status: int) -> str:
    """One-line message for an error response"""
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if value:
                return str(value)
        return str(body)

    if is_html(body):
        _, message = parse_html_error(body)
        return message

    if isinstance(body, str) and body.strip():
        return body.strip()

    return f"HTTP {status}"
