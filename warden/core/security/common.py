"""Character-class and traversal predicates shared by the validators.

Naming follows one convention throughout the security package:

- ``is_*`` / ``has_*`` return a bool
- ``validate_*`` return a result object with ``valid`` and ``reason``
- ``assert_*`` / ``*_or_raise`` raise SecurityError
"""

from __future__ import annotations

import re
import unicodedata
from typing import Optional

# Zero-width and direction-control code points used for visual spoofing
INVISIBLE_CHARS = (
    "\u200b",  # zero-width space
    "\u200c",  # zero-width non-joiner
    "\u200d",  # zero-width joiner
    "\u200e",  # left-to-right mark
    "\u200f",  # right-to-left mark
    "\u2060",  # word joiner
    "\u2061",  # function application
    "\u2062",  # invisible times
    "\u2063",  # invisible separator
    "\u2064",  # invisible plus
    "\ufeff",  # byte order mark
    "\u00ad",  # soft hyphen
)

# ASCII control characters except tab, newline and carriage return
CONTROL_CHAR_RE_STRICT = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
# Every ASCII control character
CONTROL_CHAR_RE_ALL = re.compile(r"[\x00-\x1f\x7f]")

def has_null_byte(value: str) -> bool:
    return "\x00" in value


def has_control_chars(value: str, strict: bool = True) -> bool:
    """Check for ASCII control characters.

    Args:
        value: String to check
        strict: When True, tab/newline/carriage return are tolerated

    Returns:
        True if a control character is present
    """
    pattern = CONTROL_CHAR_RE_STRICT if strict else CONTROL_CHAR_RE_ALL
    return pattern.search(value) is not None


def has_invisible_unicode(value: str) -> bool:
    return any(char in value for char in INVISIBLE_CHARS)


def has_path_traversal(value: str) -> bool:
    """Traversal check: any ``..`` run.

    Covers ``../``, ``/..``, ``./../``, ``...`` and both separators, since
    each of them contains a ``..`` substring.
    """
    return ".." in value


def utf8_length(value: str) -> int:
    return len(value.encode("utf-8", errors="surrogatepass"))


def nfc(value: str) -> str:
    return unicodedata.normalize("NFC", value)


def detect_unsafe_chars(value: str, subject: str, suffix: str = "") -> Optional[str]:
    """Run the strict control-character and invisible-Unicode checks.

    Args:
        value: String to inspect
        subject: Noun used in the reason, e.g. "Path" or "Flag"
        suffix: Appended to the reason, e.g. " (after normalization)"

    Returns:
        Rejection reason, or None when the string is clean
    """
    if has_control_chars(value, strict=True):
        return f"{subject} contains control characters{suffix}"
    if has_invisible_unicode(value):
        return f"{subject} contains invisible Unicode characters{suffix}"
    return None
