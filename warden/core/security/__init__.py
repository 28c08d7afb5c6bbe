"""Warden security: path, command and flag validation"""

from warden.core.security.command_allowlist import (
    COMMAND_POLICIES,
    CommandPolicy,
    SubcommandPolicy,
    assert_command_allowed,
    get_command_policy,
    is_command_allowed,
)
from warden.core.security.decorators import validate_command_param, validate_path_param
from warden.core.security.flag_validator import (
    COMBINED_FLAG_PATTERNS,
    CombinedFlagPattern,
    validate_combined_flags,
)
from warden.core.security.path_normalizer import (
    expand_tilde,
    is_secure_log_path,
    normalize_and_validate_path,
    validate_ssh_key_path,
    validate_submodule_path,
    validate_workspace_path,
)
from warden.core.security.path_validator import is_path_argument, is_secure_path
from warden.core.security.results import (
    AllowlistCheckResult,
    NormalizedPathResult,
    SymlinkResolution,
    ValidationResult,
)
from warden.core.security.symlinks import (
    contains_symlinks,
    is_symlink,
    reject_symlinked_file,
    resolve_symlinks_securely,
)

__all__ = [
    "COMBINED_FLAG_PATTERNS",
    "COMMAND_POLICIES",
    "AllowlistCheckResult",
    "CombinedFlagPattern",
    "CommandPolicy",
    "NormalizedPathResult",
    "SubcommandPolicy",
    "SymlinkResolution",
    "ValidationResult",
    "assert_command_allowed",
    "contains_symlinks",
    "expand_tilde",
    "get_command_policy",
    "is_command_allowed",
    "is_path_argument",
    "is_secure_log_path",
    "is_secure_path",
    "is_symlink",
    "normalize_and_validate_path",
    "reject_symlinked_file",
    "resolve_symlinks_securely",
    "validate_combined_flags",
    "validate_command_param",
    "validate_path_param",
    "validate_ssh_key_path",
    "validate_submodule_path",
    "validate_workspace_path",
]
