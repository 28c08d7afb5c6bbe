"""Warden logging: log-safe sanitizers and the security audit logger"""

from warden.logging.path_sanitizer import (
    contains_sensitive_dir,
    matches_sensitive_pattern,
    sanitize_path,
)
from warden.logging.redaction import (
    SanitizeOptions,
    looks_like_sensitive_data,
    sanitize_details,
    sanitize_value,
)

__all__ = [
    "SanitizeOptions",
    "contains_sensitive_dir",
    "looks_like_sensitive_data",
    "matches_sensitive_pattern",
    "sanitize_details",
    "sanitize_path",
    "sanitize_value",
]
