"""Path sanitization for log output.

Produces a display form of a path that is safe to persist: credential-shaped
files and sensitive directories are replaced by a marker, UNC server names
are hidden, and the home directory collapses to ``~``.

Examples:
    >>> sanitize_path("/home/alice/.ssh/id_rsa", home="/home/alice")
    '[REDACTED:SENSITIVE_FILE]'
    >>> sanitize_path("/home/alice/projects/app", home="/home/alice")
    '~/projects/app'
"""

from __future__ import annotations

import os
import posixpath
import re
import sys
from typing import Optional, Sequence, Tuple

from warden.core.constants import MAX_PATTERN_CHECK_LENGTH, PATH_MAX
from warden.core.security.common import CONTROL_CHAR_RE_ALL

INVALID_PATH = "[INVALID_PATH]"
REDACTED_CONTROL_CHARS = "[REDACTED:CONTROL_CHARS]"
REDACTED_PATH_TOO_LONG = "[REDACTED:PATH_TOO_LONG]"
REDACTED_SENSITIVE_FILE = "[REDACTED:SENSITIVE_FILE]"
REDACTED_SENSITIVE_DIR = "[REDACTED:SENSITIVE_DIR]"
REDACTED_UNC_SERVER = "[REDACTED]"

SENSITIVE_DIRS_UNIX: Tuple[str, ...] = (
    # SSH and GPG
    ".ssh",
    ".gnupg",
    # Cloud credentials
    ".aws",
    ".azure",
    ".gcloud",
    ".config/gcloud",
    # Package managers with auth
    ".npmrc",
    ".yarnrc",
    ".docker",
    ".kube",
    # Database credentials
    ".pgpass",
    ".my.cnf",
    ".netrc",
    # System
    "/etc/passwd",
    "/etc/shadow",
    "/etc/ssh",
    "/etc/ssl",
    "/etc/pki",
)

SENSITIVE_DIRS_WINDOWS: Tuple[str, ...] = (
    "AppData\\Roaming",
    "AppData\\Local",
    ".ssh",
    ".aws",
    ".azure",
    ".gcloud",
    "Credentials",
    "Microsoft\\Crypto",
    "Microsoft\\Protect",
)

SENSITIVE_FILE_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"private[_-]?key",
        r"id_rsa",
        r"id_ed25519",
        r"id_ecdsa",
        r"id_dsa",
        r"\.pem$",
        r"\.key$",
        r"\.p12$",
        r"\.pfx$",
        r"credential",
        r"secret",
        r"password",
        r"token",
        r"\.env$",
        r"\.env\.",
    )
)

UNC_RE = re.compile(r"^//([^/]+)(/.*)?$")


def _is_windows(platform: Optional[str]) -> bool:
    return (platform or sys.platform) == "win32"


def _components(path: str) -> Sequence[str]:
    return [part for part in path.split("/") if part]


def _contains_sequence(components: Sequence[str], sequence: Sequence[str]) -> bool:
    width = len(sequence)
    return any(
        list(components[start : start + width]) == list(sequence)
        for start in range(len(components) - width + 1)
    )


def contains_sensitive_dir(path: str, platform: Optional[str] = None) -> bool:
    """Check a forward-slash path for sensitive directory components.

    Matching is per whole component, so ``.ssh-backup`` does not match
    ``.ssh``. Windows matching is case-insensitive. Over-long input counts
    as sensitive.
    """
    if len(path) > PATH_MAX:
        return True

    windows = _is_windows(platform)
    candidate = path.lower() if windows else path
    components = _components(candidate)

    for sensitive in SENSITIVE_DIRS_WINDOWS if windows else SENSITIVE_DIRS_UNIX:
        if windows:
            sensitive = sensitive.replace("\\", "/").lower()
        if _contains_sequence(components, _components(sensitive)):
            return True
    return False


def matches_sensitive_pattern(path: str) -> bool:
    """Check the basename and the lowercased full path against key/secret filename patterns."""
    checked = path[:MAX_PATTERN_CHECK_LENGTH]
    filename = posixpath.basename(checked)
    full_path = checked.lower()
    return any(
        pattern.search(filename) or pattern.search(full_path)
        for pattern in SENSITIVE_FILE_PATTERNS
    )


def home_directory(platform: Optional[str] = None) -> str:
    """Home directory from the environment, platform-aware; empty when unset."""
    if _is_windows(platform):
        drive = os.environ.get("HOMEDRIVE", "")
        home_path = os.environ.get("HOMEPATH", "")
        if drive and home_path:
            return drive + home_path
        return os.environ.get("USERPROFILE", "")
    return os.environ.get("HOME", "")


def _redact_unc_server(path: str) -> Optional[str]:
    if not path.startswith("//") or path.startswith("///"):
        return None
    match = UNC_RE.match(path)
    if match is None:
        return None
    return f"//{REDACTED_UNC_SERVER}{match.group(2) or ''}"


def _replace_home(path: str, home: str) -> str:
    if not home:
        return path
    home = home.replace("\\", "/").rstrip("/")
    if home and (path == home or path.startswith(home + "/")):
        return "~" + path[len(home) :]
    return path


def sanitize_path(
    path: object, *, platform: Optional[str] = None, home: Optional[str] = None
) -> str:
    """Sanitize a path for logging.

    Args:
        path: The path to sanitize; anything but a non-empty str is invalid
        platform: sys.platform value selecting the sensitive directory list
        home: Home directory to collapse to ``~`` (default: environment)

    Returns:
        A redaction marker, or the separator-normalized display path
    """
    if not path or not isinstance(path, str):
        return INVALID_PATH

    if CONTROL_CHAR_RE_ALL.search(path):
        return REDACTED_CONTROL_CHARS

    if len(path) > PATH_MAX:
        return REDACTED_PATH_TOO_LONG

    normalized = path.replace("\\", "/")

    # The server name is hidden even when the rest of the path is redacted
    unc = _redact_unc_server(normalized)
    if unc is not None:
        normalized = unc

    if matches_sensitive_pattern(normalized):
        return REDACTED_SENSITIVE_FILE

    if contains_sensitive_dir(normalized, platform):
        return REDACTED_SENSITIVE_DIR

    if unc is not None:
        return normalized

    return _replace_home(normalized, home if home is not None else home_directory(platform))
