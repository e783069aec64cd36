"""Send-by-id: deliver an approved reply and record the sent transition."""

import logging

from replydesk.core.exceptions import NotFoundError
from replydesk.db.supabase import MessageStore, get_message_store
from replydesk.models.message import MessageStatus, SendResponse
from replydesk.services.delivery import DeliveryChannel, get_delivery_channel
from replydesk.services.lifecycle import LifecycleStateMachine, validate_transition

logger = logging.getLogger(__name__)


class DispatchService:
    """Delivers one message through the delivery channel.

    Status only moves to ``sent`` after the channel accepts the message; a
    ``DeliveryFailure`` propagates to the caller with the status untouched.
    """

    def __init__(
        self,
        store: MessageStore | None = None,
        channel: DeliveryChannel | None = None,
        lifecycle: LifecycleStateMachine | None = None,
    ) -> None:
        self._store = store
        self._channel = channel
        self._lifecycle = lifecycle

    @property
    def store(self) -> MessageStore:
        if self._store is None:
            self._store = get_message_store()
        return self._store

    @property
    def channel(self) -> DeliveryChannel:
        if self._channel is None:
            self._channel = get_delivery_channel()
        return self._channel

    @property
    def lifecycle(self) -> LifecycleStateMachine:
        if self._lifecycle is None:
            self._lifecycle = LifecycleStateMachine(self.store)
        return self._lifecycle

    async def send(self, message_id: str, reply: str | None = None) -> SendResponse:
        """Deliver a message, optionally replacing its draft first.

        Args:
            message_id: ID of the message to deliver.
            reply: Operator-approved reply text. When given it is saved as the
                message's draft before delivery.

        Returns:
            SendResponse carrying the delivery channel's result.

        Raises:
            NotFoundError: If the message is not in the active store.
            InvalidTransitionError: If the message is not onscreen.
            DeliveryFailure: If the channel did not accept the message.
        """
        document = await self.store.get(message_id)
        if document is None:
            raise NotFoundError("Message", message_id)
        status = MessageStatus(document.get("status", MessageStatus.PENDING.value))
        validate_transition(status, MessageStatus.SENT)

        if reply:
            await self.store.update_reply(message_id, reply)
            document = {**document, "llm_reply": reply}

        logger.info(
            "Delivering message",
            extra={"message_id": message_id, "edited": bool(reply)},
        )
        result = await self.channel.deliver(document)

        await self.lifecycle.mark_sent(message_id)
        logger.info("Message %s delivered to %s", message_id, document.get("client_email"))
        return SendResponse(success=True, delivery_result=result)


_dispatch_service: DispatchService | None = None


def get_dispatch_service() -> DispatchService:
    """Get or create the DispatchService singleton."""
    global _dispatch_service
    if _dispatch_service is None:
        _dispatch_service = DispatchService()
    return _dispatch_service
