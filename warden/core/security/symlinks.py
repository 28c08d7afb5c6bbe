"""Symlink resolution and detection.

Resolution goes through the OS (``os.path.realpath`` in strict mode) and maps
every errno to a result instead of letting OSError escape. Nothing here is
cached: filesystem state may change between calls, and callers re-validate
the resolved path themselves.
"""

from __future__ import annotations

import errno
import logging
import os
import stat

from warden.core.constants import PATH_MAX
from warden.core.security.common import utf8_length
from warden.core.security.results import SymlinkResolution

logger = logging.getLogger(__name__)

_ERRNO_REASONS = {
    errno.ELOOP: "Symlink loop detected (ELOOP) - possible infinite loop attack",
    errno.EACCES: "Permission denied while resolving symlinks (EACCES)",
    errno.ENAMETOOLONG: "Path too long while resolving symlinks (ENAMETOOLONG)",
    errno.ENOTDIR: "A component of the path is not a directory (ENOTDIR)",
}


def error_code(error: OSError) -> str:
    if error.errno is not None and error.errno in errno.errorcode:
        return errno.errorcode[error.errno]
    return type(error).__name__


def resolve_symlinks_securely(path: str) -> SymlinkResolution:
    """Resolve a path to its real target with loop detection.

    A missing target is not an error here: the normalized input is returned
    as the resolution and callers that need the file use an existence probe.

    Args:
        path: Absolute, already normalized path

    Returns:
        SymlinkResolution with resolved_path on success
    """
    try:
        resolved = os.path.realpath(path, strict=True)
    except FileNotFoundError:
        return SymlinkResolution(valid=True, resolved_path=os.path.normpath(path))
    except OSError as e:
        reason = _ERRNO_REASONS.get(e.errno, f"Error resolving symlinks: {error_code(e)}")
        logger.debug("Symlink resolution failed: %s", reason)
        return SymlinkResolution(valid=False, reason=reason)
    except RuntimeError:
        # Raised by realpath for symlink loops on some interpreters
        return SymlinkResolution(valid=False, reason=_ERRNO_REASONS[errno.ELOOP])

    byte_length = utf8_length(resolved)
    if byte_length > PATH_MAX:
        return SymlinkResolution(
            valid=False,
            reason=f"Resolved path exceeds maximum length ({byte_length} > {PATH_MAX} bytes)",
        )

    return SymlinkResolution(valid=True, resolved_path=resolved)


def contains_symlinks(path: str) -> bool:
    """Check whether resolving a path would change it.

    A symlink loop counts as containing symlinks. Other errors (missing file,
    permissions) report False; the real resolution surfaces them later.
    """
    try:
        return os.path.realpath(path, strict=True) != os.path.normpath(path)
    except OSError as e:
        return e.errno == errno.ELOOP
    except RuntimeError:
        return True


def is_symlink(path: str) -> bool:
    """Check whether the final path component itself is a symlink."""
    try:
        return stat.S_ISLNK(os.lstat(path).st_mode)
    except OSError:
        return False


def reject_symlinked_file(path: str) -> SymlinkResolution:
    """Strict mode for write targets such as log files.

    Rejects the case where the file itself (not an ancestor) is a symlink,
    which is how a log file gets swapped for a link to a sensitive file
    between validation and write. A missing file is accepted.
    """
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError:
        return SymlinkResolution(valid=True, resolved_path=path)
    except OSError as e:
        return SymlinkResolution(
            valid=False, reason=f"Cannot inspect log file: {error_code(e)}"
        )

    if stat.S_ISLNK(mode):
        return SymlinkResolution(valid=False, reason="Log file path is a symlink")
    if not stat.S_ISREG(mode):
        return SymlinkResolution(valid=False, reason="Log file path is not a regular file")
    return SymlinkResolution(valid=True, resolved_path=path)
