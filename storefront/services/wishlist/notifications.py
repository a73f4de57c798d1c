"""Notification channel used by the wishlist store for toast-style messages."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from storefront.schemas.wishlist import Notification, NotificationLevel

logger = logging.getLogger(__name__)

ADDED = Notification(level=NotificationLevel.SUCCESS, title="Added to wishlist")
REMOVED = Notification(level=NotificationLevel.SUCCESS, title="Removed from wishlist")
ADD_FAILED = Notification(
    level=NotificationLevel.ERROR,
    title="Error",
    description="Failed to add to wishlist.",
)
REMOVE_FAILED = Notification(
    level=NotificationLevel.ERROR,
    title="Error",
    description="Failed to remove from wishlist.",
)


@runtime_checkable
class Notifier(Protocol):
    """Fire-and-forget sink for user-visible notifications."""

    def notify(self, notification: Notification) -> None: ...


class LoggingNotifier:
    """Write notifications to the application log."""

    def notify(self, notification: Notification) -> None:
        level = (
            logging.WARNING
            if notification.level is NotificationLevel.ERROR
            else logging.INFO
        )
        if notification.description:
            logger.log(level, "%s: %s", notification.title, notification.description)
        else:
            logger.log(level, "%s", notification.title)


class BufferedNotifier:
    """Keep the most recent notifications until a consumer drains them.

    The buffer is bounded; when it is full the oldest notification is dropped.
    """

    def __init__(self, max_size: int = 50) -> None:
        self._buffer: deque[Notification] = deque(maxlen=max_size)

    def notify(self, notification: Notification) -> None:
        self._buffer.append(notification)

    def drain(self) -> list[Notification]:
        drained = list(self._buffer)
        self._buffer.clear()
        return drained


class CompositeNotifier:
    """Fan a notification out to several notifiers in order."""

    def __init__(self, notifiers: Iterable[Notifier]) -> None:
        self._notifiers = tuple(notifiers)

    def notify(self, notification: Notification) -> None:
        for notifier in self._notifiers:
            notifier.notify(notification)


__all__ = [
    "ADDED",
    "ADD_FAILED",
    "BufferedNotifier",
    "CompositeNotifier",
    "LoggingNotifier",
    "Notifier",
    "REMOVED",
    "REMOVE_FAILED",
]
