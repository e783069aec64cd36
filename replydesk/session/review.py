"""Review of one message: version history, regeneration, and send."""

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from replydesk.core.exceptions import DraftFailure, ValidationError, VoiceCaptureFailure
from replydesk.models.message import Message
from replydesk.models.tone import ToneAttributes
from replydesk.session.context import SessionContext
from replydesk.session.ledger import ReplyVersionLedger
from replydesk.session.sender import SendCoordinator

logger = logging.getLogger(__name__)

REGENERATED_TEXT = "Reply regenerated successfully!"
REGENERATE_FAILED_TEXT = "Error regenerating reply. Please try again."
NO_SELECTION_TEXT = "No email selected for regeneration"

VoiceCapture = Callable[[], Awaitable[str]]


class DraftService(Protocol):
    async def regenerate(self, message: Message, tone: str, customization: str) -> str: ...


class ReviewSession:
    """One operator review at a time over the shared session context.

    The ledger lives only while a review is open: it is discarded when the
    review is closed, whether or not the message was sent.
    """

    def __init__(
        self,
        context: SessionContext,
        draft_service: DraftService,
        coordinator: SendCoordinator,
    ) -> None:
        self.context = context
        self.draft_service = draft_service
        self.coordinator = coordinator
        self.tone = ToneAttributes()
        self.customization_text = ""
        self.message: Message | None = None
        self.ledger: ReplyVersionLedger | None = None
        self.reply = ""

    @property
    def is_open(self) -> bool:
        return self.message is not None

    def _require_open(self) -> tuple[Message, ReplyVersionLedger]:
        if self.message is None or self.ledger is None:
            raise ValidationError("No message is open for review")
        return self.message, self.ledger

    def open(self, message: Message) -> ReplyVersionLedger:
        """Start reviewing a message.

        Restores a persisted history for it (cursor on the newest version)
        or seeds one with its current draft.
        """
        if self.message is not None and self.message.id != message.id:
            self.close(committed=False)

        current = self.context.working_set.get(message.id) or message
        self.message = current
        self.ledger = ReplyVersionLedger.open(current.id, current.reply, self.context.ledgers)
        self.reply = self.ledger.current
        logger.debug("Opened review for %s with %d versions", current.id, len(self.ledger))
        return self.ledger

    def set_tone(self, formality: str | None = None, length: str | None = None) -> None:
        updates = {k: v for k, v in {"formality": formality, "length": length}.items() if v}
        self.tone = self.tone.model_copy(update=updates)

    def edit(self, text: str) -> None:
        """Replace the displayed reply and the version under the cursor."""
        _, ledger = self._require_open()
        ledger.edit(text)
        self.reply = text

    def previous(self) -> str:
        _, ledger = self._require_open()
        self.reply = ledger.previous()
        return self.reply

    def next(self) -> str:
        _, ledger = self._require_open()
        self.reply = ledger.next()
        return self.reply

    async def regenerate(self, customization_text: str | None = None) -> str | None:
        """Ask the draft service for a new version.

        On success the new text becomes the newest version and the message's
        draft in the working set. On failure nothing changes and an error
        notice is shown.

        Returns:
            The new reply, or None on failure.
        """
        notifications = self.context.notifications
        if self.message is None or self.ledger is None:
            notifications.error(NO_SELECTION_TEXT)
            return None
        if customization_text is not None:
            self.customization_text = customization_text

        message, ledger = self.message, self.ledger
        try:
            new_reply = await self.draft_service.regenerate(
                message, self.tone.combined, self.customization_text
            )
        except DraftFailure as e:
            logger.warning("Regeneration failed for %s: %s", message.id, e.message)
            notifications.error(REGENERATE_FAILED_TEXT)
            return None

        # The review may have moved on while the draft service was working.
        if self.ledger is not ledger:
            logger.info("Discarding regenerated reply for closed review %s", message.id)
            return None

        ledger.append(new_reply)
        self.reply = new_reply
        self.message = message.with_reply(new_reply)
        self.context.working_set.update_reply(message.id, new_reply)
        self.customization_text = ""
        notifications.success(REGENERATED_TEXT)
        return new_reply

    async def regenerate_from_voice(self, capture: VoiceCapture) -> str | None:
        """Regenerate using a dictated instruction.

        A capture failure is reported and leaves everything unchanged; a
        blank transcript does nothing.
        """
        try:
            transcript = await capture()
        except VoiceCaptureFailure as e:
            logger.info("Voice capture failed: %s", e.reason)
            self.context.notifications.error(e.message)
            return None
        if not transcript.strip():
            logger.debug("No voice transcript to use")
            return None
        return await self.regenerate(transcript)

    async def send(self) -> bool:
        """Send the displayed version and close the review."""
        message, _ = self._require_open()
        reply = self.reply
        self.close(committed=True)
        return await self.coordinator.send(message.id, reply)

    def close(self, committed: bool = False) -> None:
        """End the review and discard its version history."""
        if self.ledger is not None:
            self.ledger.discard()
            logger.debug(
                "Cleared version history for %s (%s)",
                self.ledger.message_id,
                "sent" if committed else "closed",
            )
        self.message = None
        self.ledger = None
        self.reply = ""
        self.customization_text = ""
