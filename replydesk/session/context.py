"""Explicitly owned state for one operator session."""

import logging
from dataclasses import dataclass, field

from replydesk.session.ledger import LedgerStore
from replydesk.session.notifications import NotificationQueue
from replydesk.session.working_set import WorkingSet

logger = logging.getLogger(__name__)


class AutoSendToken:
    """Cooperative cancellation flag for one auto-send run.

    Each run gets a fresh token. Any actor may cancel it at any time; the
    run checks it before starting each send and never interrupts one
    already in flight. A cancelled token stays cancelled.
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if not self._cancelled:
            logger.info("Stopping auto-send...")
        self._cancelled = True


@dataclass
class SessionContext:
    """State shared by every component of one operator session.

    ``auto_send`` holds the token of the run in progress, from its start
    until its last send returns, and is None otherwise.
    """

    working_set: WorkingSet = field(default_factory=WorkingSet)
    notifications: NotificationQueue = field(default_factory=NotificationQueue)
    ledgers: LedgerStore = field(default_factory=LedgerStore)
    auto_send: AutoSendToken | None = None

    @property
    def is_auto_sending(self) -> bool:
        """True while a run is in progress and has not been asked to stop."""
        return self.auto_send is not None and not self.auto_send.cancelled
