"""The operator's working set: ordered, de-duplicated active messages."""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from replydesk.models.message import Message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Removal:
    """Record of an optimistic removal, enough to undo it.

    Attributes:
        message: The removed message.
        index: Its position at removal time.
        preceding_ids: IDs that were ahead of it, nearest last.
    """

    message: Message
    index: int
    preceding_ids: tuple[str, ...]


class WorkingSet:
    """Ordered collection of messages with unique IDs.

    Only the poller (merge), the send coordinator (remove/restore) and the
    review session (draft updates) write to it.
    """

    def __init__(self, messages: Iterable[Message] = ()) -> None:
        self._messages: list[Message] = []
        self.replace_all(messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, message_id: object) -> bool:
        return any(m.id == message_id for m in self._messages)

    @property
    def messages(self) -> list[Message]:
        """A copy of the current contents."""
        return list(self._messages)

    def ids(self) -> list[str]:
        """IDs in display order."""
        return [m.id for m in self._messages]

    def get(self, message_id: str) -> Message | None:
        """Find a message by ID."""
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def index_of(self, message_id: str) -> int:
        """Position of a message, or -1."""
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                return index
        return -1

    def replace_all(self, messages: Iterable[Message]) -> None:
        """Reset contents (initial seed); later duplicates overwrite earlier ones in place."""
        self._messages = []
        self.merge(messages)

    def merge(self, batch: Iterable[Message]) -> int:
        """Union a batch into the set.

        Existing entries keep their position and take the incoming content;
        unseen IDs are appended in batch order.

        Returns:
            Number of messages appended.
        """
        positions = {m.id: i for i, m in enumerate(self._messages)}
        added = 0
        for message in batch:
            index = positions.get(message.id)
            if index is None:
                positions[message.id] = len(self._messages)
                self._messages.append(message)
                added += 1
            else:
                self._messages[index] = message
        return added

    def remove(self, message_id: str) -> Removal | None:
        """Remove a message, returning what is needed to restore it."""
        index = self.index_of(message_id)
        if index < 0:
            return None
        message = self._messages.pop(index)
        preceding = tuple(m.id for m in self._messages[:index])
        return Removal(message=message, index=index, preceding_ids=preceding)

    def restore(self, removal: Removal) -> int:
        """Put a removed message back, preserving its order relative to survivors.

        It is placed right after the nearest message that preceded it and is
        still present, or at the front if none are. With no changes since the
        removal this is exactly the original index.

        Returns:
            The index it was restored at.
        """
        existing = self.index_of(removal.message.id)
        if existing >= 0:
            logger.debug("Message %s already back in working set", removal.message.id)
            return existing

        position = 0
        for preceding_id in reversed(removal.preceding_ids):
            anchor = self.index_of(preceding_id)
            if anchor >= 0:
                position = anchor + 1
                break
        self._messages.insert(position, removal.message)
        return position

    def update_reply(self, message_id: str, reply: str) -> bool:
        """Replace a message's draft in place."""
        index = self.index_of(message_id)
        if index < 0:
            return False
        self._messages[index] = self._messages[index].with_reply(reply)
        return True
