"""User notifications (toasts) raised by the core."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from loguru import logger


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


DEFAULT_DURATIONS_MS: dict[NotificationLevel, int] = {
    NotificationLevel.SUCCESS: 3000,
    NotificationLevel.ERROR: 5000,
    NotificationLevel.WARNING: 4000,
    NotificationLevel.INFO: 3000,
}

_LOG_LEVELS: dict[NotificationLevel, str] = {
    NotificationLevel.SUCCESS: "INFO",
    NotificationLevel.ERROR: "WARNING",
    NotificationLevel.WARNING: "WARNING",
    NotificationLevel.INFO: "INFO",
}


@dataclass(frozen=True)
class Notification:
    """One toast.

    A notification with an ``id`` is shown at most once while it is active;
    ``persistent`` ones stay active until dismissed.
    """

    message: str
    level: NotificationLevel = NotificationLevel.INFO
    description: str | None = None
    id: str | None = None
    persistent: bool = False
    duration_ms: int | None = None

    @property
    def effective_duration_ms(self) -> int | None:
        if self.persistent:
            return None
        if self.duration_ms is not None:
            return self.duration_ms
        return DEFAULT_DURATIONS_MS[self.level]


class Notifier(Protocol):
    def notify(self, notification: Notification) -> bool: ...


NotificationListener = Callable[[Notification], None]


@dataclass
class NotificationCenter:
    """In-process notifier that records, logs and fans out notifications."""

    history: list[Notification] = field(default_factory=list)
    _active: dict[str, Notification] = field(default_factory=dict)
    _listeners: list[NotificationListener] = field(default_factory=list)

    def notify(self, notification: Notification) -> bool:
        """Show a notification unless one with the same id is active.

        Returns:
            ``True`` when the notification was shown.
        """
        log = logger.bind(
            notification_id=notification.id, level=notification.level.value
        )
        if notification.id is not None and notification.id in self._active:
            log.debug("Suppressed duplicate notification")
            return False

        if notification.id is not None:
            self._active[notification.id] = notification
        self.history.append(notification)
        log.log(_LOG_LEVELS[notification.level], notification.message)
        for listener in list(self._listeners):
            listener(notification)
        return True

    def dismiss(self, notification_id: str) -> bool:
        return self._active.pop(notification_id, None) is not None

    def is_active(self, notification_id: str) -> bool:
        return notification_id in self._active

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def success(self, message: str, description: str | None = None) -> bool:
        return self.notify(
            Notification(message, NotificationLevel.SUCCESS, description)
        )

    def error(self, message: str, description: str | None = None) -> bool:
        return self.notify(Notification(message, NotificationLevel.ERROR, description))

    def warning(self, message: str, description: str | None = None) -> bool:
        return self.notify(
            Notification(message, NotificationLevel.WARNING, description)
        )

    def info(self, message: str, description: str | None = None) -> bool:
        return self.notify(Notification(message, NotificationLevel.INFO, description))


__all__ = [
    "DEFAULT_DURATIONS_MS",
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
    "Notifier",
]
