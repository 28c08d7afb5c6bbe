"""Command allowlist.

Default-deny policy engine for external commands. A command runs only if it
is in COMMAND_POLICIES and every argument passes the per-argument checks;
path-shaped arguments go through is_secure_path and dash-prefixed ones
through validate_combined_flags.

Example:
    >>> is_command_allowed("git", ["config", "--local", "user.name", "John Doe"]).allowed
    True
    >>> is_command_allowed("git", ["push"]).reason
    "Subcommand 'git push' is not in the allowlist"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from warden.core.constants import MAX_ARG_LENGTH, MAX_ARGS_COUNT, CommandName
from warden.core.exceptions import CommandNotAllowedError
from warden.core.security.flag_validator import validate_combined_flags
from warden.core.security.path_validator import is_path_argument, is_secure_path
from warden.core.security.results import AllowlistCheckResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubcommandPolicy:
    """Argument policy for a command or one of its subcommands.

    Attributes:
        allowed: False disables the entry without removing it
        description: What the entry is used for
        allowed_args: Flags and fixed positionals accepted by exact match
        options_with_values: Arguments whose next argument is a free value
        allow_any_positional: Accept any non-flag positional
        allow_path_positionals: Accept path-shaped positionals only
    """

    allowed: bool = True
    description: str = ""
    allowed_args: Tuple[str, ...] = ()
    options_with_values: Tuple[str, ...] = ()
    allow_any_positional: bool = False
    allow_path_positionals: bool = False


@dataclass(frozen=True)
class CommandPolicy(SubcommandPolicy):
    """Top-level command policy; when subcommands is set, args[0] must name one."""

    subcommands: Optional[Mapping[str, SubcommandPolicy]] = field(default=None)


COMMAND_POLICIES: Mapping[CommandName, CommandPolicy] = MappingProxyType(
    {
        CommandName.GIT: CommandPolicy(
            description="Git version control",
            subcommands=MappingProxyType(
                {
                    "--version": SubcommandPolicy(description="Check git version"),
                    "config": SubcommandPolicy(
                        description="Git configuration",
                        allowed_args=(
                            "--local",
                            "--global",
                            "user.name",
                            "user.email",
                            "user.signingkey",
                            "commit.gpgsign",
                        ),
                        options_with_values=(
                            "user.name",
                            "user.email",
                            "user.signingkey",
                            "commit.gpgsign",
                        ),
                    ),
                    "rev-parse": SubcommandPolicy(
                        description="Git repository detection",
                        allowed_args=("--is-inside-work-tree", "--show-toplevel", "--git-dir"),
                    ),
                    # Path positionals only, so "update" or "add" never pass as a positional
                    "submodule": SubcommandPolicy(
                        description="Submodule status",
                        allowed_args=("status", "--recursive"),
                        allow_path_positionals=True,
                    ),
                }
            ),
        ),
        CommandName.SSH_ADD: CommandPolicy(
            description="SSH agent key management",
            allowed_args=("-l", "-d", "-D", "--apple-use-keychain"),
            allow_any_positional=True,
        ),
        CommandName.SSH_KEYGEN: CommandPolicy(
            description="SSH key operations (read-only)",
            allowed_args=("-lf", "-l", "-f"),
            options_with_values=("-f", "-lf"),
        ),
    }
)


def get_command_policy(command: str) -> Optional[CommandPolicy]:
    """Look up the policy for a command name, or None when unknown."""
    try:
        return COMMAND_POLICIES.get(CommandName(command))
    except ValueError:
        return None


def _check_argument(
    arg: str, prev_arg: Optional[str], command: str, policy: SubcommandPolicy
) -> Optional[str]:
    path_shaped = is_path_argument(arg)

    if not path_shaped and len(arg) > MAX_ARG_LENGTH:
        return "Argument exceeds maximum length"

    # Relative paths such as "path/to/module" are validated too
    looks_like_path = path_shaped or "/" in arg
    if looks_like_path:
        path_result = is_secure_path(arg)
        if not path_result.valid:
            return f"Path argument rejected: {path_result.reason}"

    if prev_arg is not None and prev_arg in policy.options_with_values:
        if arg.startswith("-"):
            return f"Value for '{prev_arg}' cannot be a flag ('{arg}')"
        return None

    if arg in policy.allowed_args:
        return None

    # Flags never fall through to the positional rules
    if arg.startswith("-"):
        if not arg.startswith("--") and len(arg) > 2:
            flag_result = validate_combined_flags(arg, command, policy.allowed_args)
            if flag_result.valid:
                return None
            return flag_result.reason or "Invalid combined flag"
        return f"Flag '{arg}' is not allowed for this command"

    if policy.allow_any_positional:
        return None

    if policy.allow_path_positionals and looks_like_path:
        return None

    return f"Argument '{arg}' is not allowed for this command"


def is_command_allowed(command: str, args: Sequence[str]) -> AllowlistCheckResult:
    """Check a command and its full argument vector against the allowlist.

    Args:
        command: Command name, e.g. "git"
        args: Every argument that will be passed to the command

    Returns:
        AllowlistCheckResult; reason names the first failing check
    """
    result = _evaluate(command, list(args))
    if not result.allowed:
        logger.debug("Command %r rejected: %s", command, result.reason)
    return result


def _evaluate(command: str, args: Sequence[str]) -> AllowlistCheckResult:
    policy = get_command_policy(command)
    if policy is None:
        return AllowlistCheckResult.deny(f"Command '{command}' is not in the allowlist")

    if not policy.allowed:
        return AllowlistCheckResult.deny(f"Command '{command}' is explicitly disabled")

    if not args:
        return AllowlistCheckResult.allow()

    if len(args) > MAX_ARGS_COUNT:
        return AllowlistCheckResult.deny("Too many arguments")

    active: SubcommandPolicy = policy
    remaining = args
    if policy.subcommands is not None:
        subcommand = args[0]
        sub_policy = policy.subcommands.get(subcommand)
        if sub_policy is None:
            return AllowlistCheckResult.deny(
                f"Subcommand '{command} {subcommand}' is not in the allowlist"
            )
        if not sub_policy.allowed:
            return AllowlistCheckResult.deny(f"Subcommand '{command} {subcommand}' is disabled")
        active = sub_policy
        remaining = args[1:]

    prev_arg: Optional[str] = None
    for arg in remaining:
        reason = _check_argument(arg, prev_arg, command, active)
        if reason is not None:
            return AllowlistCheckResult.deny(reason)
        prev_arg = arg

    return AllowlistCheckResult.allow()


def assert_command_allowed(command: str, args: Sequence[str]) -> None:
    """Raise CommandNotAllowedError unless the command is allowed.

    For execution wrappers: a denial must stop the operation, never be retried.
    """
    result = is_command_allowed(command, args)
    if not result.allowed:
        raise CommandNotAllowedError(command, result.reason or "Command not allowed")
