"""Optimistic send with rollback, and the sequential auto-send batch."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from replydesk.core.config import settings
from replydesk.core.exceptions import DeliveryFailure, NotFoundError
from replydesk.session.context import AutoSendToken, SessionContext
from replydesk.session.working_set import Removal

logger = logging.getLogger(__name__)

SENDING_TEXT = "Sending email..."
FAILED_TEXT = "Failed to send email. Please try again."
EMPTY_BATCH_TEXT = "No emails to auto-send!"
BATCH_RUNNING_TEXT = "Auto-send is already running."


class ReplySender(Protocol):
    async def send_message(self, message_id: str, reply: str) -> Any: ...


class SendCoordinator:
    """Sends one message with optimistic removal and full rollback on failure."""

    def __init__(self, context: SessionContext, sender: ReplySender) -> None:
        self.context = context
        self.sender = sender

    async def send(self, message_id: str, override_reply: str | None = None) -> bool:
        """Send a message's reply.

        The message leaves the working set before the delivery call starts,
        so a running auto-send batch cannot pick it up again. If delivery
        fails for any reason it is put back where it was and an error notice
        is shown; the failure never propagates.

        Args:
            message_id: ID of a message in the working set.
            override_reply: Reply to send instead of the stored draft.

        Returns:
            True if delivered, False if rolled back.

        Raises:
            NotFoundError: If the message is not in the working set. Nothing
                is changed in that case.
        """
        working_set = self.context.working_set
        notifications = self.context.notifications

        removal = working_set.remove(message_id)
        if removal is None:
            raise NotFoundError("Message", message_id)

        message = removal.message
        reply = override_reply or message.reply
        loading_id = notifications.loading(SENDING_TEXT)

        try:
            result = await self.sender.send_message(message_id, reply)
        except DeliveryFailure as e:
            self._roll_back(removal, loading_id)
            logger.warning("Send failed for message %s: %s", message_id, e.message)
            return False
        except Exception:
            self._roll_back(removal, loading_id)
            logger.exception("Unexpected error sending message %s", message_id)
            return False

        notifications.remove(loading_id)
        notifications.success(f"Email sent to {message.sender}")
        logger.info("Email %s sent successfully", message_id, extra={"result": result})
        return True

    def _roll_back(self, removal: Removal, loading_id: str) -> None:
        notifications = self.context.notifications
        notifications.remove(loading_id)
        position = self.context.working_set.restore(removal)
        notifications.error(FAILED_TEXT)
        logger.info("Restored message %s at %d", removal.message.id, position)


@dataclass
class AutoSendReport:
    """Outcome of one auto-send run."""

    attempted: list[str] = field(default_factory=list)
    sent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    cancelled: bool = False


class AutoSendBatchProcessor:
    """Drives the send coordinator over a snapshot of the working set.

    Sends are strictly sequential; the cancellation token is checked before
    each one. A failed send is rolled back and the batch moves on.

    Args:
        context: The owning session.
        coordinator: Performs each individual send.
        delay: Pause after each attempt, in seconds.
    """

    def __init__(
        self,
        context: SessionContext,
        coordinator: SendCoordinator,
        delay: float | None = None,
    ) -> None:
        self.context = context
        self.coordinator = coordinator
        self.delay = delay if delay is not None else settings.AUTO_SEND_DELAY_SECONDS

    async def auto_send_all(self) -> AutoSendReport:
        """Send every message currently in the working set, in order."""
        report = AutoSendReport()

        if len(self.context.working_set) == 0:
            self.context.notifications.error(EMPTY_BATCH_TEXT)
            return report
        if self.context.auto_send is not None:
            # A stopped run still owns the slot until its in-flight send returns.
            self.context.notifications.error(BATCH_RUNNING_TEXT)
            return report

        token = AutoSendToken()
        self.context.auto_send = token
        snapshot = tuple(self.context.working_set.ids())
        logger.info("Starting auto-send for %d emails", len(snapshot))

        try:
            for message_id in snapshot:
                if token.cancelled:
                    logger.info("Auto-send aborted by operator after %d attempts", len(report.attempted))
                    report.cancelled = True
                    break

                try:
                    delivered = await self.coordinator.send(message_id)
                except NotFoundError:
                    # Sent or removed elsewhere since the snapshot.
                    report.skipped.append(message_id)
                    continue

                report.attempted.append(message_id)
                (report.sent if delivered else report.failed).append(message_id)
                await asyncio.sleep(self.delay)
        finally:
            if self.context.auto_send is token:
                self.context.auto_send = None

        logger.info(
            "Auto-send finished. Sent: %d, Failed: %d, Skipped: %d",
            len(report.sent),
            len(report.failed),
            len(report.skipped),
        )
        return report

    def stop(self) -> None:
        """Ask the running batch to stop before its next send."""
        if self.context.auto_send is not None:
            self.context.auto_send.cancel()
