"""Transient operator notifications with self-expiry."""

import asyncio
import logging
import uuid
from collections import deque

from replydesk.core.config import settings
from replydesk.models.notification import Notification, NotificationKind

logger = logging.getLogger(__name__)

_LOG_SIZE = 200


class NotificationQueue:
    """Fire-and-forget notices for the operator.

    ``success`` and ``error`` notices remove themselves ``ttl`` seconds after
    enqueue; ``loading`` notices stay until the operation that created them
    removes them.

    Args:
        ttl: Seconds before a success/error notice expires.
    """

    def __init__(self, ttl: float | None = None) -> None:
        self.ttl = ttl if ttl is not None else settings.NOTIFICATION_TTL_SECONDS
        self._active: dict[str, Notification] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._emitted: deque[Notification] = deque(maxlen=_LOG_SIZE)

    @property
    def active(self) -> list[Notification]:
        """Notices currently visible, oldest first."""
        return list(self._active.values())

    @property
    def emitted(self) -> list[Notification]:
        """Recently enqueued notices in enqueue order, including removed ones."""
        return list(self._emitted)

    def enqueue(self, kind: NotificationKind, text: str) -> str:
        """Add a notice and return its ID immediately."""
        notification = Notification(id=uuid.uuid4().hex, kind=kind, text=text)
        self._active[notification.id] = notification
        self._emitted.append(notification)

        if kind.self_expires:
            self._schedule_expiry(notification.id)
        return notification.id

    def loading(self, text: str) -> str:
        return self.enqueue(NotificationKind.LOADING, text)

    def success(self, text: str) -> str:
        return self.enqueue(NotificationKind.SUCCESS, text)

    def error(self, text: str) -> str:
        return self.enqueue(NotificationKind.ERROR, text)

    def remove(self, notification_id: str) -> None:
        """Delete a notice by ID; unknown IDs are ignored."""
        self._active.pop(notification_id, None)
        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()

    def clear(self) -> None:
        """Drop every active notice and pending expiry."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._active.clear()

    def _schedule_expiry(self, notification_id: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to expire on; the notice stays until removed.
            logger.debug("No running event loop; notification %s will not self-expire", notification_id)
            return
        self._timers[notification_id] = loop.call_later(self.ttl, self.remove, notification_id)
