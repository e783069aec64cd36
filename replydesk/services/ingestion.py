"""Server half of message ingestion: onscreen refresh and pending claims."""

import logging

from replydesk.db.supabase import MessageStore, get_message_store
from replydesk.models.message import Message, MessageStatus
from replydesk.services.lifecycle import LifecycleStateMachine

logger = logging.getLogger(__name__)


class IngestionService:
    """Reads messages for the operator's working set."""

    def __init__(
        self,
        store: MessageStore | None = None,
        lifecycle: LifecycleStateMachine | None = None,
    ) -> None:
        self._store = store
        self._lifecycle = lifecycle

    @property
    def store(self) -> MessageStore:
        if self._store is None:
            self._store = get_message_store()
        return self._store

    @property
    def lifecycle(self) -> LifecycleStateMachine:
        if self._lifecycle is None:
            self._lifecycle = LifecycleStateMachine(self.store)
        return self._lifecycle

    async def fetch_onscreen(self) -> list[Message]:
        """All messages already presented, oldest first. Does not change any status."""
        docs = await self.store.find_by_status(MessageStatus.ONSCREEN.value)
        return [Message.from_document(doc) for doc in docs]

    async def claim_pending(self) -> list[Message]:
        """Claim newly arrived messages (pending → onscreen) and return them."""
        docs = await self.lifecycle.claim_pending()
        if docs:
            logger.info("Claimed %d pending messages", len(docs))
        return [Message.from_document(doc) for doc in docs]


_ingestion_service: IngestionService | None = None


def get_ingestion_service() -> IngestionService:
    """Get or create the IngestionService singleton."""
    global _ingestion_service
    if _ingestion_service is None:
        _ingestion_service = IngestionService()
    return _ingestion_service
