"""
Masking of credentials in DSN options and of secret-looking bound values
before they reach a log record.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

REDACTED_VALUE = "***"

# Keys are compared with separators stripped, so "API-Key" matches "apikey".
_KEY_PATTERN = re.compile(r"passw(or)?d|pwd|secret|token|apikey|accesskey|privatekey|sslkey")
_VALUE_PATTERN = re.compile(r"passw(or)?d|secret|token|api[_-]?key|bearer|authorization", re.IGNORECASE)


def is_sensitive_key(key: str) -> bool:
    compact = re.sub(r"[^a-z0-9]", "", key.lower())
    return bool(_KEY_PATTERN.search(compact))


def is_sensitive_value(value: str) -> bool:
    return bool(_VALUE_PATTERN.search(value))


def redact_mapping(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: REDACTED_VALUE if is_sensitive_key(str(key)) else value for key, value in values.items()}


def redact_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode("utf-8", errors="ignore")
    elif isinstance(value, str):
        text = value
    else:
        return value
    return REDACTED_VALUE if is_sensitive_value(text) else value


def redact_params(params: Iterable[Any]) -> list[Any]:
    return [redact_value(value) for value in params]
