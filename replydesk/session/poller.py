"""Ingestion poller: keeps the working set fed with newly arrived messages."""

import asyncio
import logging
from typing import Protocol

from replydesk.core.config import settings
from replydesk.core.exceptions import ExternalServiceError
from replydesk.models.message import Message
from replydesk.session.context import SessionContext

logger = logging.getLogger(__name__)


class MessageSource(Protocol):
    async def fetch_onscreen(self) -> list[Message]: ...

    async def fetch_pending(self) -> list[Message]: ...


class IngestionPoller:
    """Seeds the working set once, then merges pending claims on an interval.

    Overlapping polls are harmless: the server claims each message once and
    the merge de-duplicates by ID.

    Args:
        context: The owning session.
        source: Where messages come from.
        interval: Seconds between polls.
    """

    def __init__(
        self,
        context: SessionContext,
        source: MessageSource,
        interval: float | None = None,
    ) -> None:
        self.context = context
        self.source = source
        self.interval = interval if interval is not None else settings.POLL_INTERVAL_SECONDS
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> list[Message]:
        """Replace the working set with every onscreen message."""
        try:
            messages = await self.source.fetch_onscreen()
        except ExternalServiceError as e:
            logger.error("Error fetching onscreen messages: %s", e.message)
            return []
        self.context.working_set.replace_all(messages)
        logger.info("Fetched %d onscreen messages", len(messages))
        return messages

    async def poll_once(self) -> int:
        """Claim pending messages and merge them in.

        Returns:
            How many messages were new to the working set.
        """
        try:
            batch = await self.source.fetch_pending()
        except ExternalServiceError as e:
            logger.error("Error fetching new messages: %s", e.message)
            return 0
        if not batch:
            return 0
        added = self.context.working_set.merge(batch)
        logger.info("Fetched %d new pending messages (%d added)", len(batch), added)
        return added

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            logger.debug("Polling for new messages...")
            await self.poll_once()

    def start(self) -> None:
        """Begin polling in the background."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="ingestion-poller")

    async def stop(self) -> None:
        """Stop background polling and wait for the loop to exit."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
