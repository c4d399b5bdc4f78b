"""Transient user-facing notifications (the dashboard's toasts)."""

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime

from relevant.core.logging import get_logger

logger = get_logger(__name__)


class NotificationLevel(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    """One notification as shown to the user."""

    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class Notifier:
    """Collects notifications in the order they were raised."""

    def __init__(self, max_history: int = 50) -> None:
        self.max_history = max_history
        self._items: list[Notification] = []

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    @property
    def last(self) -> Notification | None:
        return self._items[-1] if self._items else None

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._items.append(notification)
        del self._items[: -self.max_history]
        logger.info("Notification", level=level.value, message=message)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    def clear(self) -> None:
        self._items.clear()


__all__ = ["NotificationLevel", "Notification", "Notifier"]
