"""Warden - Exception hierarchy

Validation predicates never raise for policy outcomes; they return result
objects. These exceptions are raised only at guarded boundaries (see
warden.core.security.decorators) where a denied verdict must stop the caller.
"""

from __future__ import annotations

from typing import Optional


class WardenError(Exception):
    """Base error for the warden package"""


class SecurityError(WardenError):
    """Raised when input validation fails at a guarded boundary"""

    def __init__(self, reason: str, field: Optional[str] = None):
        self.reason = reason
        self.field = field
        message = f"{field}: {reason}" if field else reason
        super().__init__(message)


class CommandNotAllowedError(SecurityError):
    """Raised when a command is rejected by the allowlist"""

    def __init__(self, command: str, reason: str):
        self.command = command
        super().__init__(reason, field="command")
