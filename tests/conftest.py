"""Shared fixtures for ReplyDesk tests."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from replydesk.core.circuit_breaker import get_all_circuit_breakers
from replydesk.core.exceptions import DeliveryFailure
from replydesk.models.message import ConversationRecord, Message


class InMemoryMessageStore:
    """Dict-backed stand-in for MessageStore with the same async surface."""

    def __init__(self, documents: Sequence[dict[str, Any]] = ()) -> None:
        self.messages: dict[str, dict[str, Any]] = {}
        self.history: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[str] = []
        for doc in documents:
            self.messages[str(doc["id"])] = dict(doc)

    async def find_by_status(self, status: str) -> list[dict[str, Any]]:
        rows = [copy.deepcopy(d) for d in self.messages.values() if d.get("status") == status]
        return sorted(rows, key=lambda d: d.get("created_at") or "")

    async def get(self, message_id: str) -> dict[str, Any] | None:
        doc = self.messages.get(message_id)
        return copy.deepcopy(doc) if doc else None

    async def transition(
        self,
        message_ids: Sequence[str],
        from_status: str,
        to_status: str,
        extra: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append(f"transition:{from_status}->{to_status}")
        changed = []
        for message_id in message_ids:
            doc = self.messages.get(message_id)
            if doc is not None and doc.get("status") == from_status:
                doc.update({"status": to_status, **(extra or {})})
                changed.append(copy.deepcopy(doc))
        return changed

    async def update_reply(self, message_id: str, reply: str) -> None:
        self.messages[message_id]["llm_reply"] = reply

    async def insert(self, document: dict[str, Any]) -> dict[str, Any]:
        self.messages[str(document["id"])] = dict(document)
        return document

    async def delete(self, message_id: str, status: str) -> int:
        self.calls.append(f"delete:{message_id}")
        doc = self.messages.get(message_id)
        if doc is None or doc.get("status") != status:
            return 0
        del self.messages[message_id]
        return 1

    async def get_conversation(self, email: str) -> ConversationRecord | None:
        if email not in self.history:
            return None
        return ConversationRecord(email=email, conversations=list(self.history[email]))

    async def append_conversation(self, email: str, document: dict[str, Any]) -> int:
        self.calls.append(f"append:{document['id']}")
        self.history.setdefault(email, []).append(copy.deepcopy(document))
        return len(self.history[email])


class FakeBackend:
    """Session-side backend double: message source plus reply sender.

    ``fail_ids`` makes ``send_message`` raise DeliveryFailure for those IDs.
    """

    def __init__(
        self,
        onscreen: Sequence[Message] = (),
        pending: Sequence[Sequence[Message]] = (),
        fail_ids: Sequence[str] = (),
    ) -> None:
        self.onscreen = list(onscreen)
        self.pending_batches = [list(batch) for batch in pending]
        self.fail_ids = set(fail_ids)
        self.sent: list[tuple[str, str]] = []
        self.attempts: list[str] = []
        self.closed = False

    async def fetch_onscreen(self) -> list[Message]:
        return list(self.onscreen)

    async def fetch_pending(self) -> list[Message]:
        if not self.pending_batches:
            return []
        return self.pending_batches.pop(0)

    async def send_message(self, message_id: str, reply: str) -> Any:
        self.attempts.append(message_id)
        if message_id in self.fail_ids:
            raise DeliveryFailure("webhook down", message_id=message_id)
        self.sent.append((message_id, reply))
        return {"success": True, "id": message_id}

    async def close(self) -> None:
        self.closed = True


_BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def make_document(
    message_id: str,
    status: str = "pending",
    email: str | None = None,
    minutes: int = 0,
    **fields: Any,
) -> dict[str, Any]:
    """Build a stored message document."""
    doc = {
        "id": message_id,
        "client_email": email or f"customer{message_id}@example.com",
        "email_subject": f"Order {message_id}",
        "original_email": f"Where is order {message_id}?",
        "email_summary": f"Customer asks about order {message_id}",
        "llm_reply": f"Draft reply {message_id}",
        "status": status,
        "created_at": (_BASE_TIME + timedelta(minutes=minutes)).isoformat(),
    }
    doc.update(fields)
    return doc


def make_message(message_id: str, reply: str | None = None, **fields: Any) -> Message:
    """Build a working-set message."""
    return Message.from_document(
        make_document(message_id, status="onscreen", llm_reply=reply or f"Draft reply {message_id}", **fields)
    )


@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """Every test starts with closed circuits."""
    for breaker in get_all_circuit_breakers().values():
        breaker.reset()
    yield
    for breaker in get_all_circuit_breakers().values():
        breaker.reset()


@pytest.fixture
def memory_store() -> InMemoryMessageStore:
    return InMemoryMessageStore()
