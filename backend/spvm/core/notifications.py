"""Transient toast notifications for the operator UI."""

from collections import deque
from typing import Deque, List, Optional

from spvm.core.config import settings
from spvm.core.shared_models import NotificationType
from spvm.schemas.console import Notification


class NotificationCenter:
    """Bounded queue of pending notifications.

    The UI drains it periodically; unread notifications beyond the capacity
    are dropped oldest-first.
    """

    def __init__(self, capacity: Optional[int] = None):
        """Initialize the queue.

        Args:
            capacity: Maximum number of pending notifications (defaults to settings)
        """
        self._pending: Deque[Notification] = deque(
            maxlen=capacity or settings.NOTIFICATION_CAPACITY
        )

    def notify(self, message: str, type: NotificationType = NotificationType.INFO) -> Notification:
        """Queue a notification."""
        notification = Notification(type=type, message=message)
        self._pending.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        """Queue a success notification."""
        return self.notify(message, NotificationType.SUCCESS)

    def error(self, message: str) -> Notification:
        """Queue an error notification."""
        return self.notify(message, NotificationType.ERROR)

    def warning(self, message: str) -> Notification:
        """Queue a warning notification."""
        return self.notify(message, NotificationType.WARNING)

    def info(self, message: str) -> Notification:
        """Queue an info notification."""
        return self.notify(message, NotificationType.INFO)

    def drain(self) -> List[Notification]:
        """Return and remove every pending notification."""
        drained = list(self._pending)
        self._pending.clear()
        return drained
