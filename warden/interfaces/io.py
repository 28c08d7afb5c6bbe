"""Host capability protocols.

The security logger reports error events to the user through a
NotificationHandler supplied by the host (an editor, a CLI). Without one the
no-op handler is used and notifications are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class NotificationType(str, Enum):
    """Types of notifications for user feedback."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notification:
    """Notification data structure.

    Attributes:
        notification_type: The type of notification.
        message: The notification message text, already sanitized.
        details: Optional sanitized details.
    """

    notification_type: NotificationType
    message: str
    details: dict[str, Any] | None = None


@runtime_checkable
class NotificationHandler(Protocol):
    """Protocol for notification display."""

    def show(self, notification: Notification) -> None:
        """Display a notification.

        Args:
            notification: The Notification object to display.
        """
        ...


class NoOpNotificationHandler(NotificationHandler):
    """No-op notification handler used when the host offers none."""

    def show(self, notification: Notification) -> None:
        pass
