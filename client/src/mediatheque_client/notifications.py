"""User-facing notifications.

MediaLibrary reports every outcome through a ``Notifier`` handed to it by
the host application. ``NotificationCenter`` is the default in-process
implementation: it keeps a bounded history and fans out to subscribers.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Level(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: Level
    title: str
    message: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...


Subscriber = Callable[[Notification], None]

_LOG_LEVELS = {
    Level.SUCCESS: logging.INFO,
    Level.INFO: logging.INFO,
    Level.WARNING: logging.WARNING,
    Level.ERROR: logging.WARNING,
}


class NotificationCenter:
    """Collects notifications and forwards them to subscribers."""

    def __init__(self, max_history: int = 50):
        self._history: deque[Notification] = deque(maxlen=max_history)
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback*; returns a function that unregisters it."""
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    def notify(self, notification: Notification) -> None:
        self._history.append(notification)
        logger.log(
            _LOG_LEVELS[notification.level],
            "%s: %s", notification.title, notification.message,
            extra={"level_name": notification.level.value},
        )
        for callback in list(self._subscribers):
            callback(notification)

    @property
    def history(self) -> list[Notification]:
        return list(self._history)

    @property
    def last(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    def clear(self) -> None:
        self._history.clear()
