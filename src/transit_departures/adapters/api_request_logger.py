"""Opt-in logging of outgoing feed downloads and Cityway calls.

Set TD_LOG_REQUESTS=true to log every upstream request before it is sent.
Credentials travelling in headers or in the query string are masked.
"""

import logging
import os
from collections.abc import Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

REDACTED = "***"
SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})
SENSITIVE_QUERY_KEYS = frozenset({"apikey", "api_key", "key", "token", "access_token"})


def request_logging_enabled() -> bool:
    return os.getenv("TD_LOG_REQUESTS", "").strip().lower() in {"1", "true", "yes"}


def redact_url(url: str) -> str:
    """Mask credential query parameters; other URLs are returned untouched."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    if not any(key.lower() in SENSITIVE_QUERY_KEYS for key, _ in query):
        return url
    masked = [
        (key, REDACTED if key.lower() in SENSITIVE_QUERY_KEYS else value) for key, value in query
    ]
    return urlunsplit(parts._replace(query=urlencode(masked)))


def log_api_request(upstream: str, url: str, headers: Mapping[str, str] | None = None) -> None:
    """Log a GET to an upstream ("static feed", "Cityway trip point lookup", ...)."""
    if not request_logging_enabled():
        return

    message = f"{upstream} request: GET {redact_url(url)}"
    if headers:
        shown = ", ".join(
            f"{name}={REDACTED if name.lower() in SENSITIVE_HEADERS else value}"
            for name, value in sorted(headers.items())
        )
        message += f" [{shown}]"
    logger.info(message)
