"""Security audit logger.

Records security-relevant events (blocked commands, validation failures,
SSH key use, configuration changes). Every event's details pass through
sanitize_details before they reach any sink.

Sinks:
- the ``warden.audit`` stdlib logger, at the level mapped from severity
- an optional rotating JSON-lines file, whose path must pass is_secure_log_path
- the host NotificationHandler, for error events only
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from warden.core.constants import MAX_ID_LENGTH, MAX_LOG_MESSAGE_SIZE
from warden.core.security.path_normalizer import is_secure_log_path
from warden.core.settings import Settings, get_settings
from warden.interfaces.io import (
    NoOpNotificationHandler,
    Notification,
    NotificationHandler,
    NotificationType,
)
from warden.logging.path_sanitizer import sanitize_path
from warden.logging.redaction import SanitizeOptions, sanitize_details

logger = logging.getLogger(__name__)

AUDIT_LOGGER_NAME = "warden.audit"
LOG_FILE_NAME = "security.log"
SHOWN_ARGS = 3
MAX_CONFIG_CHANGES = 100


class SecurityEventType(str, Enum):
    """Security event types"""

    SSH_KEY_LOAD = "SSH_KEY_LOAD"
    SSH_KEY_REMOVE = "SSH_KEY_REMOVE"
    VALIDATION_FAILURE = "VALIDATION_FAILURE"
    COMMAND_BLOCKED = "COMMAND_BLOCKED"
    COMMAND_TIMEOUT = "COMMAND_TIMEOUT"
    COMMAND_ERROR = "COMMAND_ERROR"
    CONFIG_CHANGE = "CONFIG_CHANGE"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def log_level(self) -> int:
        return _SEVERITY_LEVELS[self]


_SEVERITY_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class SecurityEvent:
    """A sanitized audit event.

    Attributes:
        timestamp: ISO 8601 UTC timestamp
        type: Event type
        severity: Event severity
        details: Sanitized details
    """

    timestamp: str
    type: SecurityEventType
    severity: Severity
    details: Dict[str, Any] = field(default_factory=dict)


def format_event(event: SecurityEvent) -> str:
    """Render an event as ``[ts] [SEVERITY] TYPE: {json}``.

    The JSON part is truncated at MAX_LOG_MESSAGE_SIZE characters.
    """
    prefix = f"[{event.timestamp}] [{event.severity.value.upper()}] {event.type.value}"
    try:
        payload = json.dumps(event.details, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as e:
        return f"{prefix}: [Failed to serialize: {type(e).__name__}]"
    if len(payload) > MAX_LOG_MESSAGE_SIZE:
        payload = payload[:MAX_LOG_MESSAGE_SIZE] + "...[truncated]"
    return f"{prefix}: {payload}"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per line for the audit file."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": getattr(record, "event_timestamp", None),
            "level": record.levelname,
            "category": "SECURITY",
            "message": record.getMessage(),
            "metadata": getattr(record, "event_details", {}),
        }
        return json.dumps(entry, ensure_ascii=False, default=str)


def _truncate_id(value: str) -> str:
    if len(value) > MAX_ID_LENGTH:
        return value[:MAX_ID_LENGTH] + "..."
    return value


class SecurityLogger:
    """Audit logger for security events.

    Args:
        notification_handler: Host capability used for error events
            (default: no-op)
        sanitize_options: Redaction mode applied to every event
        min_file_level: Minimum stdlib level written to the audit file
    """

    def __init__(
        self,
        notification_handler: Optional[NotificationHandler] = None,
        sanitize_options: Optional[SanitizeOptions] = None,
        min_file_level: int = logging.INFO,
    ):
        self.notification_handler = notification_handler or NoOpNotificationHandler()
        self.sanitize_options = sanitize_options or SanitizeOptions()
        self.min_file_level = min_file_level
        self._audit = logging.getLogger(AUDIT_LOGGER_NAME)
        self._file_handler: Optional[RotatingFileHandler] = None

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        notification_handler: Optional[NotificationHandler] = None,
    ) -> "SecurityLogger":
        """Build a logger from Settings, enabling the file sink if configured."""
        settings = settings or get_settings()
        security_logger = cls(
            notification_handler=notification_handler,
            sanitize_options=SanitizeOptions(
                redact_all_sensitive=settings.redact_all_sensitive
            ),
            min_file_level=settings.log_level_number,
        )
        if settings.log_file_enabled:
            security_logger.enable_file_logging(
                str(settings.log_dir_path()),
                max_bytes=settings.log_max_bytes,
                backup_count=settings.log_backup_count,
            )
        return security_logger

    @property
    def file_logging_enabled(self) -> bool:
        return self._file_handler is not None

    def enable_file_logging(
        self, log_dir: str, *, max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5
    ) -> bool:
        """Attach the rotating audit file under log_dir.

        The file is always ``security.log`` directly under log_dir; a target
        that fails is_secure_log_path leaves file logging disabled.

        Returns:
            True if the file sink is active
        """
        try:
            os.makedirs(log_dir, mode=0o700, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create audit log directory: %s", type(e).__name__)
            return False

        check = is_secure_log_path(os.path.join(log_dir, LOG_FILE_NAME), log_dir)
        if not check.valid or check.resolved_path is None:
            logger.error("Invalid audit log file path: %s", check.reason)
            return False

        try:
            handler = RotatingFileHandler(
                check.resolved_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            logger.error("Cannot open audit log file: %s", type(e).__name__)
            return False

        self.close()
        handler.setLevel(self.min_file_level)
        handler.setFormatter(JsonLineFormatter())
        self._file_handler = handler
        logger.debug("Audit file logging enabled")
        return True

    def close(self) -> None:
        if self._file_handler is not None:
            self._file_handler.close()
            self._file_handler = None

    def log(
        self,
        event_type: SecurityEventType,
        severity: Severity,
        details: Mapping[str, Any],
    ) -> SecurityEvent:
        """Sanitize and record an event on every sink.

        Returns:
            The sanitized event as recorded
        """
        event = SecurityEvent(
            timestamp=datetime.now(timezone.utc).isoformat(),
            type=event_type,
            severity=severity,
            details=sanitize_details(details, self.sanitize_options),
        )

        self._audit.log(severity.log_level, format_event(event))
        self._write_to_file(event)

        if severity is Severity.ERROR:
            self.notification_handler.show(
                Notification(
                    notification_type=NotificationType.ERROR,
                    message=f"Security: {event_type.value} - check the security log for details",
                )
            )
        return event

    def _write_to_file(self, event: SecurityEvent) -> None:
        if self._file_handler is None:
            return
        level = event.severity.log_level
        if level < self.min_file_level:
            return
        record = self._audit.makeRecord(
            AUDIT_LOGGER_NAME,
            level,
            __file__,
            0,
            event.type.value,
            None,
            None,
            extra={"event_timestamp": event.timestamp, "event_details": event.details},
        )
        self._file_handler.handle(record)

    def _args_details(self, args: Sequence[str]) -> Dict[str, Any]:
        # Flat fields: nested containers would be abstracted away by sanitize_details
        details: Dict[str, Any] = {"arg_count": len(args)}
        for index, arg in enumerate(args[:SHOWN_ARGS]):
            details[f"arg_{index}"] = arg
        if len(args) > SHOWN_ARGS:
            details["args_more"] = f"... and {len(args) - SHOWN_ARGS} more"
        return details

    def log_ssh_key_load(self, key_path: str, success: bool) -> SecurityEvent:
        return self.log(
            SecurityEventType.SSH_KEY_LOAD,
            Severity.INFO if success else Severity.WARNING,
            {"key_path": sanitize_path(key_path), "success": success},
        )

    def log_ssh_key_remove(self, key_path: str) -> SecurityEvent:
        return self.log(
            SecurityEventType.SSH_KEY_REMOVE,
            Severity.INFO,
            {"key_path": sanitize_path(key_path)},
        )

    def log_validation_failure(
        self, field_name: str, reason: str, value: Any = None
    ) -> SecurityEvent:
        return self.log(
            SecurityEventType.VALIDATION_FAILURE,
            Severity.WARNING,
            {
                "field": field_name,
                "reason": reason,
                "value": value,
                "value_type": type(value).__name__,
            },
        )

    def log_command_blocked(
        self, command: str, args: Sequence[str], reason: str
    ) -> SecurityEvent:
        return self.log(
            SecurityEventType.COMMAND_BLOCKED,
            Severity.ERROR,
            {"command": command, "reason": reason, **self._args_details(args)},
        )

    def log_command_timeout(
        self, command: str, args: Sequence[str], timeout_ms: int, cwd: Optional[str] = None
    ) -> SecurityEvent:
        details: Dict[str, Any] = {
            "command": command,
            "timeout_ms": timeout_ms,
            **self._args_details(args),
        }
        if cwd:
            details["cwd"] = sanitize_path(cwd)
        return self.log(SecurityEventType.COMMAND_TIMEOUT, Severity.WARNING, details)

    def log_command_error(
        self, command: str, args: Sequence[str], error: BaseException, cwd: Optional[str] = None
    ) -> SecurityEvent:
        details: Dict[str, Any] = {
            "command": command,
            "error_name": type(error).__name__,
            "error_message": str(error),
            **self._args_details(args),
        }
        if cwd:
            details["cwd"] = sanitize_path(cwd)
        return self.log(SecurityEventType.COMMAND_ERROR, Severity.WARNING, details)

    def log_config_change(self, config_key: str) -> SecurityEvent:
        return self.log(
            SecurityEventType.CONFIG_CHANGE,
            Severity.INFO,
            {"config_key": _truncate_id(config_key)},
        )

    def log_config_changes(
        self, changes: Sequence[Tuple[str, Any, Any]]
    ) -> list[SecurityEvent]:
        """Record (key, previous, new) changes, at most MAX_CONFIG_CHANGES of them."""
        events = [
            self.log(
                SecurityEventType.CONFIG_CHANGE,
                Severity.INFO,
                {
                    "config_key": _truncate_id(key),
                    "previous_value": previous,
                    "new_value": new,
                },
            )
            for key, previous, new in changes[:MAX_CONFIG_CHANGES]
        ]
        if len(changes) > MAX_CONFIG_CHANGES:
            events.append(
                self.log(
                    SecurityEventType.CONFIG_CHANGE,
                    Severity.WARNING,
                    {"message": f"Truncated ({len(changes)} changes)"},
                )
            )
        return events
