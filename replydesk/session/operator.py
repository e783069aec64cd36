"""OperatorSession: one operator's working set and the components acting on it."""

import logging

from replydesk.services.draft_service import DraftServiceClient
from replydesk.session.backend_client import BackendClient
from replydesk.session.context import SessionContext
from replydesk.session.poller import IngestionPoller
from replydesk.session.review import DraftService, ReviewSession
from replydesk.session.sender import AutoSendBatchProcessor, AutoSendReport, SendCoordinator

logger = logging.getLogger(__name__)


class OperatorSession:
    """Wires the poller, sender, batch processor and review over one context.

    Args:
        backend: Message source and reply sender (usually a BackendClient).
        draft_service: Regenerates reply drafts.
        context: Session state; a fresh one is created when omitted.
        poll_interval: Seconds between pending polls.
        auto_send_delay: Pause between auto-sent messages.
    """

    def __init__(
        self,
        backend: BackendClient | None = None,
        draft_service: DraftService | None = None,
        context: SessionContext | None = None,
        poll_interval: float | None = None,
        auto_send_delay: float | None = None,
    ) -> None:
        self.backend = backend or BackendClient()
        self.context = context or SessionContext()
        self.poller = IngestionPoller(self.context, self.backend, poll_interval)
        self.coordinator = SendCoordinator(self.context, self.backend)
        self.auto_sender = AutoSendBatchProcessor(self.context, self.coordinator, auto_send_delay)
        self.review = ReviewSession(
            self.context, draft_service or DraftServiceClient(), self.coordinator
        )

    async def start(self) -> None:
        """Seed the working set from onscreen messages, then start polling."""
        await self.poller.refresh()
        self.poller.start()
        logger.info("Operator session started with %d messages", len(self.context.working_set))

    async def close(self) -> None:
        """Stop polling and auto-send, drop the open review, close HTTP clients."""
        self.auto_sender.stop()
        await self.poller.stop()
        self.review.close(committed=False)
        self.context.notifications.clear()
        await self.backend.close()

    async def send(self, message_id: str, override_reply: str | None = None) -> bool:
        return await self.coordinator.send(message_id, override_reply)

    async def auto_send_all(self) -> AutoSendReport:
        return await self.auto_sender.auto_send_all()

    def stop_auto_send(self) -> None:
        self.auto_sender.stop()
