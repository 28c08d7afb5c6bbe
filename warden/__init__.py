"""Warden - Input validation engine for privileged contexts

Decides whether untrusted paths and command lines are safe to use, and
redacts sensitive values before they reach a log.
"""

from warden.core.exceptions import CommandNotAllowedError, SecurityError, WardenError
from warden.core.security import (
    AllowlistCheckResult,
    NormalizedPathResult,
    ValidationResult,
    assert_command_allowed,
    is_command_allowed,
    is_secure_path,
    normalize_and_validate_path,
    validate_ssh_key_path,
)
from warden.logging import SanitizeOptions, sanitize_details, sanitize_path, sanitize_value

__version__ = "0.1.0"

__all__ = [
    "AllowlistCheckResult",
    "CommandNotAllowedError",
    "NormalizedPathResult",
    "SanitizeOptions",
    "SecurityError",
    "ValidationResult",
    "WardenError",
    "assert_command_allowed",
    "is_command_allowed",
    "is_secure_path",
    "normalize_and_validate_path",
    "sanitize_details",
    "sanitize_path",
    "sanitize_value",
    "validate_ssh_key_path",
]
