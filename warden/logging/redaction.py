"""Sensitive value redaction for structured log fields.

Every field of an audit record passes through sanitize_details before it is
persisted or displayed.

Redaction rules:
- None, numbers and booleans pass through
- Path-shaped strings go through sanitize_path
- Strings with sensitive keywords or high-entropy secret shapes are masked
- Long strings are truncated
- Containers are abstracted to their size and never recursed into
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Optional

from warden.core.constants import (
    MAX_LOG_STRING_LENGTH,
    MAX_PATTERN_CHECK_LENGTH,
    MAX_SECRET_LENGTH,
    MIN_SECRET_LENGTH,
)
from warden.logging.path_sanitizer import sanitize_path

REDACTED_ALL_VALUES = "[REDACTED:ALL_VALUES]"
REDACTED_SENSITIVE_VALUE = "[REDACTED:SENSITIVE_VALUE]"
REDACTED_KEY = "[REDACTED_KEY]"
TRUNCATED_SUFFIX = "...[truncated]"
MAX_SHOWN_KEYS = 5

SENSITIVE_KEYWORDS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"api[_-]?key",
        r"secret",
        r"password",
        r"token",
        r"bearer",
        r"authorization",
        r"credential",
        r"private",
    )
)

BASE64_LIKE_RE = re.compile(r"[A-Za-z0-9+/]+=*")
LOOKS_LIKE_PATH_RE = re.compile(r"^(?:[/~]|[A-Za-z]:|\\\\)")

# Character classes counted toward the high-entropy secret heuristic
_CHAR_CLASSES = tuple(re.compile(p) for p in (r"[A-Z]", r"[a-z]", r"[0-9]", r"[+/=]"))


@dataclass(frozen=True)
class SanitizeOptions:
    """Caller-supplied redaction mode.

    Attributes:
        redact_all_sensitive: Mask every string value (maximum privacy)
    """

    redact_all_sensitive: bool = False


def looks_like_sensitive_data(value: str) -> bool:
    """Check if a string looks like it contains a secret.

    True on a sensitive keyword, or for a 32-256 character base64-like
    string that mixes at least three character classes. Only the first
    MAX_PATTERN_CHECK_LENGTH characters are inspected.
    """
    checked = value[:MAX_PATTERN_CHECK_LENGTH]

    if any(keyword.search(checked) for keyword in SENSITIVE_KEYWORDS):
        return True

    if MIN_SECRET_LENGTH <= len(checked) <= MAX_SECRET_LENGTH and BASE64_LIKE_RE.fullmatch(checked):
        # Plain digit runs and similar single-class strings are not secrets
        class_count = sum(1 for char_class in _CHAR_CLASSES if char_class.search(checked))
        return class_count >= 3

    return False


def _sanitize_string(value: str) -> str:
    if not value:
        return value
    if LOOKS_LIKE_PATH_RE.match(value):
        return sanitize_path(value)
    if looks_like_sensitive_data(value):
        return REDACTED_SENSITIVE_VALUE
    if len(value) > MAX_LOG_STRING_LENGTH:
        return value[:MAX_LOG_STRING_LENGTH] + TRUNCATED_SUFFIX
    return value


def _describe_mapping(value: Mapping) -> str:
    keys = [str(key) for key in value.keys()]
    if any(looks_like_sensitive_data(key) for key in keys):
        return f"[Object({len(keys)} keys)]"
    shown = ", ".join(keys[:MAX_SHOWN_KEYS])
    more = "..." if len(keys) > MAX_SHOWN_KEYS else ""
    return f"[Object({len(keys)} keys: {shown}{more})]"


def sanitize_value(value: Any, options: Optional[SanitizeOptions] = None) -> Any:
    """Sanitize a single value for logging.

    Containers are never recursed into: a list becomes ``[Array(n)]`` and a
    mapping becomes its key count plus, when no key looks sensitive, up to
    five key names.

    Args:
        value: The value to sanitize
        options: Redaction mode (default: SanitizeOptions())

    Returns:
        A value safe to log

    Examples:
        >>> sanitize_value("password123")
        '[REDACTED:SENSITIVE_VALUE]'
        >>> sanitize_value([1, 2, 3])
        '[Array(3)]'
    """
    options = options or SanitizeOptions()

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if options.redact_all_sensitive:
            return REDACTED_ALL_VALUES
        return _sanitize_string(value)

    if isinstance(value, (list, tuple, set, frozenset)):
        return f"[Array({len(value)})]"

    if isinstance(value, Mapping):
        return _describe_mapping(value)

    return f"[{type(value).__name__}]"


def sanitize_details(
    details: Mapping[str, Any], options: Optional[SanitizeOptions] = None
) -> Dict[str, Any]:
    """Sanitize every key and value of a log record's details.

    Sensitive-looking keys are replaced by ``[REDACTED_KEY]``; several such
    keys in one record collapse onto that single key, the last value winning.
    """
    sanitized: Dict[str, Any] = {}
    for key, value in details.items():
        safe_key = REDACTED_KEY if looks_like_sensitive_data(str(key)) else str(key)
        sanitized[safe_key] = sanitize_value(value, options)
    return sanitized
