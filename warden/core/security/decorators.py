"""Guard decorators for functions that act on untrusted input.

The validators return results; these decorators turn a denied result into
SecurityError before the wrapped callable runs.

Usage:
    @validate_command_param("command", "args")
    def run(command: str, args: list[str]) -> str:
        ...
"""

from __future__ import annotations

import inspect
from functools import wraps
from typing import Any, Callable, ParamSpec, TypeVar

from warden.core.exceptions import CommandNotAllowedError, SecurityError
from warden.core.security.command_allowlist import is_command_allowed
from warden.core.security.path_normalizer import normalize_and_validate_path
from warden.core.security.path_validator import is_secure_path

P = ParamSpec("P")
R = TypeVar("R")


def _bound_argument(func: Callable[..., Any], param_name: str, args: tuple, kwargs: dict) -> Any:
    bound = inspect.signature(func).bind_partial(*args, **kwargs)
    bound.apply_defaults()
    if param_name not in bound.arguments:
        raise SecurityError(f"Parameter '{param_name}' not found")
    return bound.arguments[param_name]


def validate_path_param(
    param_name: str, *, normalize: bool = False, resolve_symlinks: bool = False
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator to validate a function parameter as a secure path.

    With normalize=True the full normalization pipeline runs instead of the
    string-only check.

    Usage:
        @validate_path_param("key_path", normalize=True, resolve_symlinks=True)
        def load_key(key_path: str) -> None:
            ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            value = _bound_argument(func, param_name, args, kwargs)
            if not isinstance(value, str):
                raise SecurityError("Path is empty or undefined", field=param_name)

            if normalize:
                result = normalize_and_validate_path(value, resolve_symlinks=resolve_symlinks)
            else:
                result = is_secure_path(value)
            if not result.valid:
                raise SecurityError(result.reason or "Invalid path", field=param_name)

            return func(*args, **kwargs)

        return wrapper

    return decorator


def validate_command_param(
    command_param: str, args_param: str
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator that runs the command allowlist before the wrapped call.

    Usage:
        @validate_command_param("cmd", "argv")
        def spawn(cmd: str, argv: list[str]) -> None:
            ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            command = _bound_argument(func, command_param, args, kwargs)
            arguments = _bound_argument(func, args_param, args, kwargs)
            if not isinstance(command, str):
                raise SecurityError("Command must be a string", field=command_param)
            if isinstance(arguments, str) or not all(isinstance(a, str) for a in arguments):
                raise SecurityError("Arguments must be a sequence of strings", field=args_param)

            result = is_command_allowed(command, list(arguments))
            if not result.allowed:
                raise CommandNotAllowedError(command, result.reason or "Command not allowed")

            return func(*args, **kwargs)

        return wrapper

    return decorator
