"""Verdict types returned by the validation engine.

Every predicate returns one of these instead of raising, so a denial is a
plain value that can be logged and asserted on. Instances are frozen and
created fresh per call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single validation check.

    Attributes:
        valid: True when every check in the chain passed.
        reason: Human-readable, non-secret reason; set only when valid is False.
    """

    valid: bool
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        if self.valid and self.reason is not None:
            raise ValueError("A valid result cannot carry a rejection reason")
        if not self.valid and not self.reason:
            raise ValueError("An invalid result must carry a rejection reason")

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason)


@dataclass(frozen=True)
class SymlinkResolution:
    """Outcome of resolving a path through the filesystem."""

    valid: bool
    resolved_path: Optional[str] = None
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class NormalizedPathResult:
    """Outcome of the normalization pipeline.

    Attributes:
        valid: True when the path survived every pre and post check.
        original_path: The raw input, kept for audit logging by the caller.
        normalized_path: Absolute, OS-normalized path (set when valid, and on
            existence-probe failures so the caller can report what was probed).
        reason: Rejection reason when valid is False.
        symlinks_resolved: True when symlink resolution changed the path.
    """

    valid: bool
    original_path: str
    normalized_path: Optional[str] = None
    reason: Optional[str] = None
    symlinks_resolved: bool = False

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class AllowlistCheckResult:
    """Outcome of a command allowlist check."""

    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls) -> "AllowlistCheckResult":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "AllowlistCheckResult":
        return cls(allowed=False, reason=reason)
