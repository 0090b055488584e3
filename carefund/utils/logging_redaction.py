"""
Logging redaction helpers.
Redacts API keys and tokens from log messages.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable


_PATTERNS: Iterable[tuple[re.Pattern, str]] = (
    # Authorization: Bearer <token>
    (re.compile(r"(Bearer\s+)([A-Za-z0-9\-\._]+)"), r"\1[REDACTED]"),
    # Query-string credentials: appid (OpenWeatherMap), token (AQICN),
    # apiKey (NewsAPI), key (Gemini)
    (re.compile(r"(?i)\b(appid|token|apikey|api_key|key)=([^&\s'\"]+)"), r"\1=[REDACTED]"),
    # Key/value pairs in config dumps
    (re.compile(r"(?i)(api[_-]?key|access_token)\s*:\s*([A-Za-z0-9\-\._]+)"), r"\1: [REDACTED]"),
)


def redact_message(message: str) -> str:
    redacted = message
    for pattern, replacement in _PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    return redacted


class RedactingFilter(logging.Filter):
    """Filter that redacts sensitive data from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Malformed format args; let the handler report it unmodified
            return True
        record.msg = redact_message(message)
        record.args = ()
        return True


def install_redaction_filter() -> None:
    """
    Attach the filter to every root handler.

    Logger-level filters do not see records propagated from child loggers,
    so the filter has to live on the handlers.
    """
    root = logging.getLogger()
    for handler in root.handlers:
        if any(isinstance(existing, RedactingFilter) for existing in handler.filters):
            continue
        handler.addFilter(RedactingFilter())
