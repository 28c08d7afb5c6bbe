"""Combined short-flag validation.

Owns short option clusters such as ``-lf``. Clusters are opt-in per exact
sequence: a cluster whose letters are each individually allowed is still
rejected unless the command registers that cluster.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from warden.core.constants import MAX_COMBINED_FLAG_CHARS, MAX_FLAG_LENGTH, CommandName
from warden.core.security.common import detect_unsafe_chars, has_null_byte, nfc
from warden.core.security.results import ValidationResult

logger = logging.getLogger(__name__)

FLAG_LETTERS_RE = re.compile(r"[a-zA-Z]+")


@dataclass(frozen=True)
class CombinedFlagPattern:
    """An accepted multi-letter short flag cluster.

    Attributes:
        pattern: Letters after the dash, e.g. "lf"
        ordered: When True the sequence must match exactly ("fl" != "lf");
            when False any permutation of the same letters matches.
    """

    pattern: str
    ordered: bool = True

    def matches(self, flag_chars: str) -> bool:
        if self.ordered:
            return flag_chars == self.pattern
        return sorted(flag_chars) == sorted(self.pattern)


COMBINED_FLAG_PATTERNS: Mapping[CommandName, Tuple[CombinedFlagPattern, ...]] = MappingProxyType(
    {
        # -lf: list the fingerprint of a key file
        CommandName.SSH_KEYGEN: (CombinedFlagPattern("lf", ordered=True),),
    }
)


def _patterns_for(command: str) -> Tuple[CombinedFlagPattern, ...]:
    try:
        return COMBINED_FLAG_PATTERNS.get(CommandName(command), ())
    except ValueError:
        return ()


def _check_flag_chars(flag: str, suffix: str = "") -> Optional[str]:
    if flag != flag.strip():
        return f"Flag contains leading or trailing whitespace{suffix}"
    if has_null_byte(flag):
        return f"Flag contains null byte{suffix}"
    return detect_unsafe_chars(flag, "Flag", suffix)


def _has_path_like_pattern(flag_chars: str) -> bool:
    return flag_chars.startswith("~") or "/" in flag_chars or "\\" in flag_chars


def _check_cluster(flag_chars: str, command: str, allowed_args: Sequence[str]) -> ValidationResult:
    if len(flag_chars) > MAX_COMBINED_FLAG_CHARS:
        return ValidationResult.fail("Combined flag has too many characters")

    if len(set(flag_chars)) != len(flag_chars):
        return ValidationResult.fail("Duplicate flag character in combined flag")

    if any(pattern.matches(flag_chars) for pattern in _patterns_for(command)):
        return ValidationResult.ok()

    single_letters = {
        allowed[1]
        for allowed in allowed_args
        if allowed.startswith("-") and not allowed.startswith("--") and len(allowed) == 2
    }
    if any(char not in single_letters for char in flag_chars):
        return ValidationResult.fail("Unknown flag character(s) in combined flag")

    return ValidationResult.fail(
        "Combined flag is not explicitly allowed. Use separate flags instead."
    )


def validate_combined_flags(
    flag: Optional[str], command: str, allowed_args: Sequence[str]
) -> ValidationResult:
    """Validate a short flag or short flag cluster.

    Arguments that do not start with ``-``, and long options, are passed
    through as valid; the caller handles those by exact match.

    Args:
        flag: The argument to validate, e.g. "-lf"
        command: Command the flag belongs to, e.g. "ssh-keygen"
        allowed_args: The command's allowed arguments (single flags as "-x")

    Returns:
        ValidationResult; reason names the first failing check

    Examples:
        >>> validate_combined_flags("-lf", "ssh-keygen", ["-l", "-f"]).valid
        True
        >>> validate_combined_flags("-fl", "ssh-keygen", ["-l", "-f"]).valid
        False
    """
    if not flag:
        return ValidationResult.fail("Flag is empty")

    reason = _check_flag_chars(flag)
    if reason:
        return ValidationResult.fail(reason)

    normalized = nfc(flag)
    reason = _check_flag_chars(normalized, " (after normalization)")
    if reason:
        return ValidationResult.fail(reason)

    if not normalized.startswith("-") or normalized.startswith("--"):
        return ValidationResult.ok()

    if len(normalized) > MAX_FLAG_LENGTH:
        return ValidationResult.fail("Flag exceeds maximum length")

    flag_chars = normalized[1:]
    if not flag_chars:
        return ValidationResult.fail("Flag contains only dash")

    if _has_path_like_pattern(flag_chars):
        return ValidationResult.fail(
            "Flag contains path-like pattern. Flags and values must be separate arguments."
        )

    if not FLAG_LETTERS_RE.fullmatch(flag_chars):
        return ValidationResult.fail(
            "Flag contains invalid characters. Only ASCII letters allowed."
        )

    if len(flag_chars) == 1:
        if f"-{flag_chars}" in allowed_args:
            return ValidationResult.ok()
        return ValidationResult.fail("Flag is not in allowlist")

    result = _check_cluster(flag_chars, command, allowed_args)
    if not result.valid:
        logger.debug("Combined flag rejected for %s: %s", command, result.reason)
    return result
