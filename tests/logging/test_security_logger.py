"""Tests for the security audit logger"""

import json
import logging
from pathlib import Path

import pytest

from warden.core.settings import Settings
from warden.interfaces.io import (
    NoOpNotificationHandler,
    NotificationHandler,
    NotificationType,
)
from warden.logging.path_sanitizer import REDACTED_SENSITIVE_FILE
from warden.logging.redaction import (
    REDACTED_ALL_VALUES,
    REDACTED_SENSITIVE_VALUE,
    SanitizeOptions,
)
from warden.logging import security_logger as security_logger_module
from warden.logging.security_logger import (
    LOG_FILE_NAME,
    SecurityEvent,
    SecurityEventType,
    SecurityLogger,
    Severity,
    format_event,
)


class RecordingHandler:
    def __init__(self):
        self.notifications = []

    def show(self, notification):
        self.notifications.append(notification)


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def security_logger(handler):
    instance = SecurityLogger(notification_handler=handler)
    yield instance
    instance.close()


def read_entries(log_dir: Path):
    lines = (log_dir / LOG_FILE_NAME).read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


class TestEvents:
    def test_command_blocked(self, security_logger, handler):
        event = security_logger.log_command_blocked(
            "git", ["push", "--force", "origin", "main"], "Subcommand 'git push' is not in the allowlist"
        )

        assert event.type is SecurityEventType.COMMAND_BLOCKED
        assert event.severity is Severity.ERROR
        assert event.details == {
            "command": "git",
            "reason": "Subcommand 'git push' is not in the allowlist",
            "arg_count": 4,
            "arg_0": "push",
            "arg_1": "--force",
            "arg_2": "origin",
            "args_more": "... and 1 more",
        }

        assert len(handler.notifications) == 1
        notification = handler.notifications[0]
        assert notification.notification_type is NotificationType.ERROR
        assert notification.message == "Security: COMMAND_BLOCKED - check the security log for details"

    def test_non_error_events_do_not_notify(self, security_logger, handler):
        security_logger.log_command_timeout("git", ["--version"], 5000)
        security_logger.log_config_change("log_level")
        assert handler.notifications == []

    def test_audit_logger_receives_formatted_event(self, security_logger, caplog):
        with caplog.at_level(logging.INFO, logger="warden.audit"):
            security_logger.log_command_blocked("ssh-add", ["-X"], "Flag '-X' is not allowed for this command")

        records = [r for r in caplog.records if r.name == "warden.audit"]
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert "[ERROR] COMMAND_BLOCKED:" in records[0].getMessage()

    def test_validation_failure_masks_value(self, security_logger):
        event = security_logger.log_validation_failure(
            "passphrase_hint", "Value rejected", "password123"
        )
        assert event.severity is Severity.WARNING
        assert event.details["value"] == REDACTED_SENSITIVE_VALUE
        assert event.details["value_type"] == "str"
        assert event.details["field"] == "passphrase_hint"

    def test_ssh_key_load_hides_key_path(self, security_logger):
        event = security_logger.log_ssh_key_load("/home/alice/.ssh/id_ed25519", success=True)
        assert event.severity is Severity.INFO
        assert event.details == {"key_path": REDACTED_SENSITIVE_FILE, "success": True}

    def test_failed_ssh_key_load_is_a_warning(self, security_logger):
        event = security_logger.log_ssh_key_load("/home/alice/.ssh/id_ed25519", success=False)
        assert event.severity is Severity.WARNING

    def test_command_error(self, security_logger):
        event = security_logger.log_command_error(
            "ssh-keygen", ["-lf", "/tmp/k.pub"], OSError("spawn failed")
        )
        assert event.details["error_name"] == "OSError"
        assert event.details["error_message"] == "spawn failed"
        assert event.details["arg_count"] == 2

    def test_redact_all_mode(self, handler):
        instance = SecurityLogger(
            notification_handler=handler,
            sanitize_options=SanitizeOptions(redact_all_sensitive=True),
        )
        event = instance.log_validation_failure("field", "reason", "plain")
        assert event.details["value"] == REDACTED_ALL_VALUES
        assert event.details["reason"] == REDACTED_ALL_VALUES

    def test_config_changes_are_capped(self, security_logger):
        changes = [(f"key_{i}", i, i + 1) for i in range(101)]

        events = security_logger.log_config_changes(changes)

        assert len(events) == 101
        assert events[0].details == {"config_key": "key_0", "previous_value": 0, "new_value": 1}
        assert events[-1].severity is Severity.WARNING
        assert events[-1].details == {"message": "Truncated (101 changes)"}


def test_format_event_truncates_payload():
    event = SecurityEvent(
        timestamp="2024-01-01T00:00:00+00:00",
        type=SecurityEventType.CONFIG_CHANGE,
        severity=Severity.INFO,
        details={"blob": "a" * 20000},
    )

    line = format_event(event)

    assert line.startswith("[2024-01-01T00:00:00+00:00] [INFO] CONFIG_CHANGE: ")
    assert line.endswith("...[truncated]")


class TestFileSink:
    def test_writes_json_lines(self, security_logger, tmp_path: Path):
        log_dir = tmp_path / "logs"
        assert security_logger.enable_file_logging(str(log_dir)) is True

        security_logger.log_command_blocked("git", ["push"], "denied")
        security_logger.close()

        (entry,) = read_entries(log_dir)
        assert entry["level"] == "ERROR"
        assert entry["category"] == "SECURITY"
        assert entry["message"] == "COMMAND_BLOCKED"
        assert entry["metadata"]["command"] == "git"
        assert entry["timestamp"]

    def test_min_level_filters_file_only(self, handler, tmp_path: Path):
        instance = SecurityLogger(notification_handler=handler, min_file_level=logging.WARNING)
        log_dir = tmp_path / "logs"
        instance.enable_file_logging(str(log_dir))

        instance.log_config_change("log_level")
        instance.log_command_timeout("git", ["--version"], 1000)
        instance.close()

        entries = read_entries(log_dir)
        assert [e["message"] for e in entries] == ["COMMAND_TIMEOUT"]

    def test_unopenable_log_file_is_reported(self, security_logger, tmp_path: Path, monkeypatch):
        def refuse(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(security_logger_module, "RotatingFileHandler", refuse)

        assert security_logger.enable_file_logging(str(tmp_path / "logs")) is False
        assert security_logger.file_logging_enabled is False

    def test_symlinked_log_file_refused(self, security_logger, tmp_path: Path, make_symlink):
        log_dir = tmp_path / "logs"
        log_dir.mkdir()
        target = tmp_path / "victim"
        target.write_text("keep")
        make_symlink(log_dir / LOG_FILE_NAME, target)

        assert security_logger.enable_file_logging(str(log_dir)) is False
        assert security_logger.file_logging_enabled is False
        assert target.read_text() == "keep"

    def test_from_settings(self, tmp_path: Path):
        configured = Settings(
            log_file_enabled=True,
            log_dir=str(tmp_path / "audit"),
            log_level="warning",
            redact_all_sensitive=True,
        )

        instance = SecurityLogger.from_settings(configured)
        try:
            assert instance.file_logging_enabled is True
            assert instance.min_file_level == logging.WARNING
            assert instance.sanitize_options.redact_all_sensitive is True
            assert (tmp_path / "audit" / LOG_FILE_NAME).exists()
        finally:
            instance.close()


def test_default_handler_satisfies_protocol():
    instance = SecurityLogger()
    assert isinstance(instance.notification_handler, NoOpNotificationHandler)
    assert isinstance(instance.notification_handler, NotificationHandler)
