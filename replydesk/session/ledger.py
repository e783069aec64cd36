"""Per-message reply version history for one review session."""

import json
import logging

logger = logging.getLogger(__name__)

KEY_PREFIX = "reply_history_"


class LedgerStore:
    """Client-local key/value store for reply histories.

    Entries are JSON arrays of strings under ``reply_history_<messageId>``.
    A missing, corrupt, or non-list entry reads as absent.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    @staticmethod
    def key(message_id: str) -> str:
        return f"{KEY_PREFIX}{message_id}"

    def load(self, message_id: str) -> list[str] | None:
        raw = self._entries.get(self.key(message_id))
        if raw is None:
            return None
        try:
            versions = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable reply history for %s", message_id)
            return None
        if not isinstance(versions, list) or not versions:
            return None
        if not all(isinstance(v, str) for v in versions):
            return None
        return versions

    def save(self, message_id: str, versions: list[str]) -> None:
        self._entries[self.key(message_id)] = json.dumps(versions)

    def discard(self, message_id: str) -> None:
        self._entries.pop(self.key(message_id), None)

    def __contains__(self, message_id: object) -> bool:
        return isinstance(message_id, str) and self.key(message_id) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ReplyVersionLedger:
    """Ordered reply snapshots plus a cursor.

    The cursor always stays within ``[0, len - 1]``. Editing rewrites the
    snapshot under the cursor; appending adds a snapshot and moves the
    cursor to it. Every change is written through to the store.
    """

    def __init__(self, message_id: str, versions: list[str], store: LedgerStore) -> None:
        if not versions:
            raise ValueError("A ledger needs at least one version")
        self.message_id = message_id
        self._versions = list(versions)
        self._cursor = len(self._versions) - 1
        self._store = store

    @classmethod
    def open(cls, message_id: str, draft: str, store: LedgerStore) -> "ReplyVersionLedger":
        """Restore a persisted ledger (cursor on its last entry) or seed one from ``draft``."""
        versions = store.load(message_id)
        ledger = cls(message_id, versions or [draft], store)
        ledger._persist()
        return ledger

    @property
    def versions(self) -> list[str]:
        return list(self._versions)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> str:
        return self._versions[self._cursor]

    def __len__(self) -> int:
        return len(self._versions)

    def edit(self, text: str) -> None:
        """Overwrite the snapshot under the cursor."""
        self._versions[self._cursor] = text
        self._persist()

    def append(self, text: str) -> None:
        """Add a snapshot and move the cursor to it."""
        self._versions.append(text)
        self._cursor = len(self._versions) - 1
        self._persist()

    def previous(self) -> str:
        """Step back one version (stops at the first)."""
        self._cursor = max(self._cursor - 1, 0)
        return self.current

    def next(self) -> str:
        """Step forward one version (stops at the last)."""
        self._cursor = min(self._cursor + 1, len(self._versions) - 1)
        return self.current

    def discard(self) -> None:
        """Remove the persisted history."""
        self._store.discard(self.message_id)

    def _persist(self) -> None:
        self._store.save(self.message_id, self._versions)
