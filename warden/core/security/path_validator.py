"""Path security validation.

Decides whether a path string is safe to resolve and open. The checks run as
an explicit ordered list; the first failing check determines the reason, and
callers (and tests) rely on that order.

Examples:
    >>> is_secure_path("/home/user/.ssh/id_rsa").valid
    True
    >>> is_secure_path("../etc/passwd").reason
    'Path contains traversal pattern (..)'
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Sequence

from warden.core.constants import PATH_MAX
from warden.core.security.common import (
    detect_unsafe_chars,
    has_null_byte,
    has_path_traversal,
    nfc,
    utf8_length,
)
from warden.core.security.results import ValidationResult

logger = logging.getLogger(__name__)

DRIVE_LETTER_RE = re.compile(r"^[a-zA-Z]:")
UNC_PREFIX_RE = re.compile(r"^[/\\]{2}")
DEVICE_PATH_RE = re.compile(r"^[/\\]{2}[.?\\]")
WINDOWS_RESERVED_NAME_RE = re.compile(
    r"^(CON|PRN|AUX|NUL|COM[0-9]|LPT[0-9])([./\\]|$)", re.IGNORECASE
)
PATH_COMPONENT_SPLIT_RE = re.compile(r"[/\\]")

Check = Callable[[str], Optional[str]]


def _check_raw_input(path: str) -> Optional[str]:
    if path != path.strip():
        return "Path contains leading or trailing whitespace"
    if has_null_byte(path):
        return "Path contains null byte"
    return detect_unsafe_chars(path, "Path")


def _check_byte_length(path: str) -> Optional[str]:
    byte_length = utf8_length(path)
    if byte_length > PATH_MAX:
        return f"Path exceeds maximum length ({byte_length} > {PATH_MAX} bytes)"
    return None


def _check_traversal(path: str) -> Optional[str]:
    if has_path_traversal(path):
        return "Path contains traversal pattern (..)"
    return None


def _check_separators(path: str) -> Optional[str]:
    # Also catches UNC prefixes before the dedicated Windows checks run.
    if "//" in path or "\\\\" in path:
        return "Path contains double slashes"
    if "\\" in path:
        return "Path contains backslash (use forward slashes for cross-platform compatibility)"
    return None


def _check_tilde(path: str) -> Optional[str]:
    if path.startswith("~") and path != "~" and not path.startswith("~/"):
        return "Tilde expansion to other users (~user) is not allowed, use ~/ only"
    return None


def _check_windows_prefixes(path: str) -> Optional[str]:
    if DRIVE_LETTER_RE.match(path):
        return "Windows absolute paths (drive letters) are not allowed in this context"
    if DEVICE_PATH_RE.match(path):
        return "Windows device paths are not allowed"
    if UNC_PREFIX_RE.match(path):
        return "UNC paths and Windows device paths are not allowed"
    return None


def _check_trailing_dots(path: str) -> Optional[str]:
    if len(path) <= 1:
        return None
    if path.endswith("."):
        return "Path ends with dot (not allowed for cross-platform compatibility)"
    if path.endswith("/.") or path.endswith("/.."):
        return "Path ends with /./ or /../ (not allowed)"
    return None


def _check_reserved_names(path: str) -> Optional[str]:
    basename = PATH_COMPONENT_SPLIT_RE.split(path)[-1]
    if WINDOWS_RESERVED_NAME_RE.match(basename):
        return "Windows reserved device names are not allowed"
    return None


def _check_prefix(path: str) -> Optional[str]:
    if path.startswith("/") or path == "~" or path.startswith("~/"):
        return None
    if path == "." or path.startswith("./"):
        return None
    return (
        "Path must be absolute (start with /) or relative to home (~/) "
        "or current directory (./)"
    )


def _check_final(path: str) -> Optional[str]:
    if has_path_traversal(path):
        return "Path contains traversal pattern"
    if len(path) > PATH_MAX:
        return f"Path exceeds maximum character length ({len(path)} > {PATH_MAX})"
    return None


# Order is part of the contract.
NORMALIZED_PATH_CHECKS: Sequence[Check] = (
    lambda p: detect_unsafe_chars(p, "Path", " (after normalization)"),
    _check_byte_length,
    _check_traversal,
    _check_separators,
    _check_tilde,
    _check_windows_prefixes,
    _check_trailing_dots,
    _check_reserved_names,
    _check_prefix,
    _check_final,
)


def is_secure_path(path: Optional[str]) -> ValidationResult:
    """Validate a path string for security.

    Rejects traversal, ``~user`` expansion, Windows drive/UNC/device paths,
    reserved device names, NUL and control characters, invisible Unicode,
    and anything over PATH_MAX bytes after NFC normalization.

    Args:
        path: The path string to validate

    Returns:
        ValidationResult; reason names the first failing check
    """
    if not path or not isinstance(path, str):
        return ValidationResult.fail("Path is empty or undefined")

    reason = _check_raw_input(path)
    if reason is None:
        normalized = nfc(path)
        for check in NORMALIZED_PATH_CHECKS:
            reason = check(normalized)
            if reason is not None:
                break

    if reason is not None:
        logger.debug("Path rejected: %s", reason)
        return ValidationResult.fail(reason)
    return ValidationResult.ok()


def is_path_argument(arg: Optional[str]) -> bool:
    """Check if a command argument looks like a file path.

    Deliberately conservative: validating a non-path as a path costs a false
    rejection, missing a path costs a bypass. Leading or trailing whitespace
    counts as path-like because it can hide one.

    Args:
        arg: The argument to check

    Returns:
        True if the argument should go through is_secure_path
    """
    if not arg:
        return False

    if arg != arg.strip():
        return True

    return (
        arg.startswith(("/", "~", "./", "../"))
        or arg in (".", "..")
        or DRIVE_LETTER_RE.match(arg) is not None
        or UNC_PREFIX_RE.match(arg) is not None
    )
