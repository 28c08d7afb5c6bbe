"""Path normalization pipeline.

Turns a validated path string into an absolute, OS-normalized path and then
re-validates the result, so normalization itself cannot be used to escape
(for example a ``~`` path that collapses outside the home directory).

Pipeline for ``normalize_and_validate_path``:

1. Raw input: empty check, byte length, full ``is_secure_path`` pre-check
2. Expand ``~`` / ``~/``; resolve relative paths against ``base_dir``
3. ``os.path.abspath`` (always absolute; collapses ``.`` and redundant separators)
4. Post-normalization check, then byte length again
5. Optional symlink resolution, re-checked with the same post check
6. Optional existence probe (best effort, not a security boundary)
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Optional

from warden.core.constants import PATH_MAX
from warden.core.security.common import (
    CONTROL_CHAR_RE_ALL,
    has_invisible_unicode,
    has_null_byte,
    has_path_traversal,
    utf8_length,
)
from warden.core.security.path_validator import is_secure_path
from warden.core.security.results import (
    NormalizedPathResult,
    SymlinkResolution,
    ValidationResult,
)
from warden.core.security.symlinks import (
    error_code,
    reject_symlinked_file,
    resolve_symlinks_securely,
)

logger = logging.getLogger(__name__)


def _home_dir(home: Optional[str]) -> str:
    return home if home is not None else os.path.expanduser("~")


def _is_within(path: str, root: str) -> bool:
    """Component-boundary containment: /home/al is not inside /home/a."""
    root = os.path.normpath(root)
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


def expand_tilde(path: str, home: Optional[str] = None) -> str:
    """Expand ``~`` and ``~/`` to the current user's home directory.

    ``~user`` forms are returned unchanged; is_secure_path rejects them.

    Args:
        path: Path that may start with ~
        home: Home directory override (defaults to the process environment)

    Returns:
        Path with the current user's ~ expanded
    """
    if not path:
        return path
    if path == "~":
        return _home_dir(home)
    if path.startswith("~/"):
        return os.path.join(_home_dir(home), path[2:])
    return path


def _check_length(path: str, original: str, context: str) -> Optional[NormalizedPathResult]:
    byte_length = utf8_length(path)
    if byte_length > PATH_MAX:
        return NormalizedPathResult(
            valid=False,
            original_path=original,
            reason=f"{context} exceeds maximum length ({byte_length} > {PATH_MAX} bytes)",
        )
    return None


def _probe_error(path: str) -> Optional[str]:
    try:
        os.stat(path)
    except OSError as e:
        return error_code(e)
    return None


def _is_secure_after_normalization(
    normalized: str, original: str, home: Optional[str]
) -> ValidationResult:
    if has_null_byte(normalized):
        return ValidationResult.fail("Normalized path contains null byte")
    if has_path_traversal(normalized):
        return ValidationResult.fail("Normalized path still contains traversal pattern (..)")
    if "//" in normalized:
        return ValidationResult.fail("Normalized path contains double slashes")

    if original.startswith("~"):
        home_dir = os.path.normpath(_home_dir(home))
        real_home = os.path.realpath(home_dir)
        if not (_is_within(normalized, home_dir) or _is_within(normalized, real_home)):
            return ValidationResult.fail("Path escaped from home directory after normalization")

    return ValidationResult.ok()


def normalize_and_validate_path(
    path: Optional[str],
    *,
    resolve_symlinks: bool = False,
    require_exists: bool = False,
    base_dir: Optional[str] = None,
    home: Optional[str] = None,
) -> NormalizedPathResult:
    """Normalize and validate a path for security.

    Args:
        path: The path to normalize and validate
        resolve_symlinks: Resolve symlinks and re-validate the target
        require_exists: Probe that the final path exists (TOCTOU tolerant)
        base_dir: Directory relative paths resolve against (default: cwd)
        home: Home directory override for ``~`` expansion

    Returns:
        NormalizedPathResult with the absolute normalized path when valid

    Example:
        >>> result = normalize_and_validate_path("~/.ssh/id_rsa", home="/home/u")
        >>> result.normalized_path
        '/home/u/.ssh/id_rsa'
    """
    if not path or not isinstance(path, str):
        return NormalizedPathResult(
            valid=False, original_path=path or "", reason="Path is empty or undefined"
        )

    too_long = _check_length(path, path, "Path")
    if too_long is not None:
        return too_long

    pre_check = is_secure_path(path)
    if not pre_check.valid:
        return NormalizedPathResult(
            valid=False,
            original_path=path,
            reason=f"Pre-normalization check failed: {pre_check.reason}",
        )

    expanded = expand_tilde(path, home)
    normalized = os.path.abspath(os.path.join(base_dir or os.getcwd(), expanded))

    post_check = _is_secure_after_normalization(normalized, path, home)
    if not post_check.valid:
        return NormalizedPathResult(
            valid=False,
            original_path=path,
            reason=f"Post-normalization check failed: {post_check.reason}",
        )

    too_long = _check_length(normalized, path, "Normalized path")
    if too_long is not None:
        return too_long

    symlinks_resolved = False
    if resolve_symlinks:
        resolution = resolve_symlinks_securely(normalized)
        if not resolution.valid:
            return NormalizedPathResult(valid=False, original_path=path, reason=resolution.reason)

        resolved = resolution.resolved_path or normalized
        symlink_check = _is_secure_after_normalization(resolved, path, home)
        if not symlink_check.valid:
            return NormalizedPathResult(
                valid=False,
                original_path=path,
                reason=f"Post-symlink check failed: {symlink_check.reason}",
            )
        if resolved != normalized:
            normalized = resolved
            symlinks_resolved = True

    if require_exists:
        probe_error = _probe_error(normalized)
        if probe_error is not None:
            return NormalizedPathResult(
                valid=False,
                original_path=path,
                normalized_path=normalized,
                reason=f"Path does not exist or is not accessible: {probe_error}",
            )

    return NormalizedPathResult(
        valid=True,
        original_path=path,
        normalized_path=normalized,
        symlinks_resolved=symlinks_resolved,
    )


def validate_ssh_key_path(
    key_path: Optional[str],
    *,
    require_exists: bool = False,
    base_dir: Optional[str] = None,
    home: Optional[str] = None,
) -> NormalizedPathResult:
    """Validate an SSH key path; symlink resolution is always on.

    Keys may live anywhere, not just under ~/.ssh.
    """
    return normalize_and_validate_path(
        key_path,
        resolve_symlinks=True,
        require_exists=require_exists,
        base_dir=base_dir,
        home=home,
    )


def validate_workspace_path(
    workspace_path: Optional[str], *, require_exists: bool = False
) -> NormalizedPathResult:
    """Validate a platform-native directory path (e.g. a project root).

    Unlike normalize_and_validate_path this accepts drive letters and
    backslashes, since hosts hand workspace roots over in native form. It
    still rejects whitespace padding, NUL, every control character, invisible
    Unicode, and over-length paths; ``..`` segments are resolved away by
    ``os.path.abspath``.
    """
    if not workspace_path or not isinstance(workspace_path, str):
        return NormalizedPathResult(
            valid=False,
            original_path=workspace_path or "",
            reason="Workspace path is empty or undefined",
        )

    if workspace_path != workspace_path.strip():
        reason = "Workspace path contains leading or trailing whitespace"
    elif has_null_byte(workspace_path):
        reason = "Workspace path contains null byte"
    elif CONTROL_CHAR_RE_ALL.search(workspace_path):
        reason = "Workspace path contains control characters"
    elif has_invisible_unicode(workspace_path):
        reason = "Workspace path contains invisible Unicode characters"
    else:
        reason = None

    if reason:
        return NormalizedPathResult(valid=False, original_path=workspace_path, reason=reason)

    normalized = os.path.abspath(workspace_path)

    byte_length = utf8_length(normalized)
    if byte_length > PATH_MAX:
        return NormalizedPathResult(
            valid=False,
            original_path=workspace_path,
            reason=f"Workspace path exceeds maximum length ({byte_length} > {PATH_MAX} bytes)",
        )

    if require_exists:
        probe_error = _probe_error(normalized)
        if probe_error is not None:
            return NormalizedPathResult(
                valid=False,
                original_path=workspace_path,
                normalized_path=normalized,
                reason=f"Workspace path does not exist or is not accessible: {probe_error}",
            )

    return NormalizedPathResult(valid=True, original_path=workspace_path, normalized_path=normalized)


def _submodule_pre_checks(submodule_path: str) -> Optional[str]:
    if not submodule_path or not submodule_path.strip():
        return "Submodule path is empty"
    if os.path.isabs(submodule_path):
        return "Submodule path must be relative to workspace root"
    if CONTROL_CHAR_RE_ALL.search(submodule_path):
        return "Submodule path contains control characters"
    byte_length = utf8_length(submodule_path)
    if byte_length > PATH_MAX:
        return f"Submodule path exceeds maximum length ({byte_length} > {PATH_MAX} bytes)"
    return None


def validate_submodule_path(
    submodule_path: str,
    workspace_path: str,
    *,
    verify_symlinks: bool = True,
    require_exists: bool = False,
) -> NormalizedPathResult:
    """Validate a submodule path reported by ``git submodule status``.

    Submodule paths arrive relative (``vendor/lib``). They are anchored with
    ``./``, normalized against the validated workspace root, and must stay
    inside it; with verify_symlinks the resolved target must stay inside too.

    Args:
        submodule_path: Path relative to the workspace root
        workspace_path: Absolute workspace root (platform-native)
        verify_symlinks: Re-check containment after resolving symlinks
        require_exists: Require the submodule directory to exist

    Returns:
        NormalizedPathResult for the submodule directory
    """
    workspace = validate_workspace_path(workspace_path, require_exists=True)
    if not workspace.valid or workspace.normalized_path is None:
        return NormalizedPathResult(
            valid=False,
            original_path=submodule_path,
            reason=f"Invalid workspace path: {workspace.reason or 'validation failed'}",
        )
    workspace_root = workspace.normalized_path

    reason = _submodule_pre_checks(submodule_path)
    if reason:
        return NormalizedPathResult(valid=False, original_path=submodule_path, reason=reason)

    anchored = submodule_path if submodule_path.startswith("./") else "./" + submodule_path
    result = normalize_and_validate_path(anchored, base_dir=workspace_root)
    if not result.valid or result.normalized_path is None:
        return replace(result, original_path=submodule_path)
    normalized = result.normalized_path

    if not _is_within(normalized, workspace_root):
        return NormalizedPathResult(
            valid=False,
            original_path=submodule_path,
            reason="Submodule path escapes workspace root after normalization",
        )

    if verify_symlinks and os.path.exists(normalized):
        resolution = resolve_symlinks_securely(normalized)
        if not resolution.valid or resolution.resolved_path is None:
            return NormalizedPathResult(
                valid=False,
                original_path=submodule_path,
                reason=f"Symlink resolution failed: {resolution.reason or 'unknown error'}",
                symlinks_resolved=True,
            )
        if not _is_within(resolution.resolved_path, os.path.realpath(workspace_root)):
            return NormalizedPathResult(
                valid=False,
                original_path=submodule_path,
                reason="Submodule symlink target escapes workspace root",
                symlinks_resolved=True,
            )
        return NormalizedPathResult(
            valid=True,
            original_path=submodule_path,
            normalized_path=resolution.resolved_path,
            symlinks_resolved=True,
        )

    if require_exists:
        probe_error = _probe_error(normalized)
        if probe_error is not None:
            return NormalizedPathResult(
                valid=False,
                original_path=submodule_path,
                normalized_path=normalized,
                reason=f"Submodule path does not exist: {probe_error}",
            )

    return replace(result, original_path=submodule_path)


def is_secure_log_path(log_path: str, allowed_base: str) -> SymlinkResolution:
    """Validate a log file target before the log writer opens it.

    The parent directory is resolved through symlinks and must lie under
    allowed_base; the file itself must not be a symlink.

    Args:
        log_path: Platform-native log file path
        allowed_base: Only directory log files may be written under

    Returns:
        SymlinkResolution whose resolved_path is the path to open
    """
    target = validate_workspace_path(log_path)
    if not target.valid or target.normalized_path is None:
        return SymlinkResolution(valid=False, reason=f"Invalid log file path: {target.reason}")

    base = validate_workspace_path(allowed_base)
    if not base.valid or base.normalized_path is None:
        return SymlinkResolution(valid=False, reason=f"Invalid log directory: {base.reason}")

    real_base = os.path.realpath(base.normalized_path)
    parent = os.path.realpath(os.path.dirname(target.normalized_path))
    candidate = os.path.join(parent, os.path.basename(target.normalized_path))

    if not _is_within(candidate, real_base) or candidate == real_base:
        return SymlinkResolution(
            valid=False, reason="Log file path escapes the allowed log directory"
        )

    return reject_symlinked_file(candidate)
