"""Lifecycle state machine for support messages.

pending → onscreen → sent → archived. Transitions only ever move forward
by one step, and re-applying a transition that already happened is a
no-op. Each transition is owned by exactly one component:

- ``pending → onscreen``: the ingestion poller (:meth:`claim_pending`)
- ``onscreen → sent``: the send path, after delivery succeeds (:meth:`mark_sent`)
- ``sent → archived``: the archival job (:meth:`archive`)
"""

import logging
from datetime import UTC, datetime
from typing import Any

from replydesk.core.exceptions import InvalidTransitionError
from replydesk.db.supabase import MessageStore, get_message_store
from replydesk.models.message import MessageStatus

logger = logging.getLogger(__name__)

_NEXT_STATUS: dict[MessageStatus, MessageStatus] = {
    MessageStatus.PENDING: MessageStatus.ONSCREEN,
    MessageStatus.ONSCREEN: MessageStatus.SENT,
    MessageStatus.SENT: MessageStatus.ARCHIVED,
}


def validate_transition(from_status: MessageStatus, to_status: MessageStatus) -> None:
    """Raise InvalidTransitionError unless ``to_status`` directly follows ``from_status``."""
    if _NEXT_STATUS.get(from_status) is not to_status:
        raise InvalidTransitionError(from_status.value, to_status.value)


class LifecycleStateMachine:
    """Applies lifecycle transitions against the message store."""

    def __init__(self, store: MessageStore | None = None) -> None:
        self._store = store

    @property
    def store(self) -> MessageStore:
        """The backing message store (resolved lazily)."""
        if self._store is None:
            self._store = get_message_store()
        return self._store

    async def _apply(
        self,
        message_ids: list[str],
        from_status: MessageStatus,
        to_status: MessageStatus,
        extra: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        validate_transition(from_status, to_status)
        return await self.store.transition(
            message_ids, from_status.value, to_status.value, extra=extra
        )

    async def claim_pending(self) -> list[dict[str, Any]]:
        """Move every pending message to onscreen, returning the ones this call claimed.

        The read and the update are separate store calls, but the update is
        conditional on ``status = pending``: a message another poller claimed
        in between is simply not returned here.
        """
        pending = await self.store.find_by_status(MessageStatus.PENDING.value)
        if not pending:
            return []

        ids = [str(doc["id"]) for doc in pending]
        claimed_rows = await self._apply(ids, MessageStatus.PENDING, MessageStatus.ONSCREEN)
        claimed_ids = {str(row["id"]) for row in claimed_rows}

        if len(claimed_ids) < len(ids):
            logger.info(
                "Skipped %d pending messages claimed by a concurrent poll",
                len(ids) - len(claimed_ids),
            )

        # Keep creation order from the read; status reflects the update.
        return [
            {**doc, "status": MessageStatus.ONSCREEN.value}
            for doc in pending
            if str(doc["id"]) in claimed_ids
        ]

    async def mark_sent(self, message_id: str) -> bool:
        """Record a successful delivery.

        Returns:
            True if this call moved the message to sent; False if it was
            not onscreen (already sent, archived, or unknown).
        """
        rows = await self._apply(
            [message_id],
            MessageStatus.ONSCREEN,
            MessageStatus.SENT,
            extra={"sent_at": datetime.now(UTC).isoformat()},
        )
        if not rows:
            logger.info("Message %s was not onscreen; sent transition skipped", message_id)
            return False
        return True

    async def archive(self, document: dict[str, Any]) -> bool:
        """Copy a sent message into its sender's history, then remove it from the active store.

        The append always completes before the delete is issued, so a crash
        in between can only leave a duplicate in history, never a lost
        message.

        Returns:
            True if the active record was removed by this call.
        """
        status = MessageStatus(document.get("status", MessageStatus.SENT.value))
        validate_transition(status, MessageStatus.ARCHIVED)

        email = document.get("client_email") or ""
        await self.store.append_conversation(email, document)
        removed = await self.store.delete(str(document["id"]), MessageStatus.SENT.value)
        return removed > 0
