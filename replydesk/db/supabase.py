"""Supabase client module for database operations."""

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar, cast

from supabase import Client, create_client

from replydesk.core.circuit_breaker import CircuitBreakerOpen, supabase_circuit_breaker
from replydesk.core.config import settings
from replydesk.core.exceptions import DatabaseError
from replydesk.models.message import ConversationRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SupabaseClient:
    """Singleton Supabase client for backend operations."""

    _client: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """Get or create the Supabase client singleton.

        Returns:
            Initialized Supabase client.

        Raises:
            DatabaseError: If client initialization fails.
        """
        if cls._client is None:
            try:
                cls._client = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                logger.exception("Failed to initialize Supabase client")
                raise DatabaseError(f"Failed to initialize database connection: {e}") from e
        return cls._client

    @classmethod
    def reset_client(cls) -> None:
        """Reset the client singleton (useful for testing)."""
        cls._client = None


class MessageStore:
    """Document-store operations on the active messages and the history archive.

    Every status change goes through :meth:`transition`, a single conditional
    update, so two callers racing for the same rows can never both win.
    """

    def __init__(
        self,
        client: Client | None = None,
        messages_table: str | None = None,
        history_table: str | None = None,
    ) -> None:
        self._client = client
        self.messages_table = messages_table or settings.MESSAGES_TABLE
        self.history_table = history_table or settings.HISTORY_TABLE

    @property
    def client(self) -> Client:
        """The underlying Supabase client (resolved lazily)."""
        if self._client is None:
            self._client = SupabaseClient.get_client()
        return self._client

    def _run(self, operation: str, query: Callable[[], T]) -> T:
        """Execute a query through the circuit breaker, mapping failures to DatabaseError."""
        try:
            supabase_circuit_breaker.check()
        except CircuitBreakerOpen as e:
            raise DatabaseError(f"Document store unavailable: {e}") from e
        try:
            result = query()
        except Exception as e:
            supabase_circuit_breaker.record_failure()
            logger.exception("Document store operation failed", extra={"operation": operation})
            raise DatabaseError(f"Failed to {operation}: {e}") from e
        supabase_circuit_breaker.record_success()
        return result

    async def find_by_status(self, status: str) -> list[dict[str, Any]]:
        """Fetch every active message with ``status``, oldest first."""
        response = self._run(
            "find messages by status",
            lambda: self.client.table(self.messages_table)
            .select("*")
            .eq("status", status)
            .order("created_at")
            .execute(),
        )
        return cast(list[dict[str, Any]], response.data or [])

    async def get(self, message_id: str) -> dict[str, Any] | None:
        """Fetch one active message by ID, or None."""
        response = self._run(
            "fetch message",
            lambda: self.client.table(self.messages_table)
            .select("*")
            .eq("id", message_id)
            .limit(1)
            .execute(),
        )
        rows = response.data or []
        return cast(dict[str, Any], rows[0]) if rows else None

    async def transition(
        self,
        message_ids: Sequence[str],
        from_status: str,
        to_status: str,
        extra: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Move messages still in ``from_status`` to ``to_status``.

        Returns:
            Only the rows this call changed. Rows already moved by someone
            else are left alone and omitted.
        """
        if not message_ids:
            return []
        values: dict[str, Any] = {"status": to_status, **(extra or {})}
        response = self._run(
            "update message status",
            lambda: self.client.table(self.messages_table)
            .update(values)
            .in_("id", list(message_ids))
            .eq("status", from_status)
            .execute(),
        )
        return cast(list[dict[str, Any]], response.data or [])

    async def update_reply(self, message_id: str, reply: str) -> None:
        """Store an operator-edited reply as the message's draft."""
        self._run(
            "update reply",
            lambda: self.client.table(self.messages_table)
            .update({"llm_reply": reply})
            .eq("id", message_id)
            .execute(),
        )

    async def insert(self, document: dict[str, Any]) -> dict[str, Any]:
        """Insert a new active message (used by seeding and tests)."""
        response = self._run(
            "insert message",
            lambda: self.client.table(self.messages_table).insert(document).execute(),
        )
        rows = response.data or []
        return cast(dict[str, Any], rows[0]) if rows else document

    async def delete(self, message_id: str, status: str) -> int:
        """Delete an active message only while it still has ``status``.

        Returns:
            Number of rows removed (0 or 1).
        """
        response = self._run(
            "delete message",
            lambda: self.client.table(self.messages_table)
            .delete()
            .eq("id", message_id)
            .eq("status", status)
            .execute(),
        )
        return len(response.data or [])

    async def get_conversation(self, email: str) -> ConversationRecord | None:
        """Fetch a customer's conversation record, or None."""
        response = self._run(
            "fetch conversation record",
            lambda: self.client.table(self.history_table)
            .select("*")
            .eq("email", email)
            .limit(1)
            .execute(),
        )
        rows = response.data or []
        return ConversationRecord.model_validate(rows[0]) if rows else None

    async def append_conversation(self, email: str, document: dict[str, Any]) -> int:
        """Append an archived message to its sender's record, creating it if absent.

        This is a read followed by a whole-array write, so two concurrent
        appends for the same email can lose one entry. Only the archival job
        calls it, and the scheduler runs that job with ``max_instances=1``.

        Returns:
            Length of the record after the append.
        """
        record = await self.get_conversation(email)
        archived = {**document, "archived_at": datetime.now(UTC).isoformat()}
        if record is None:
            self._run(
                "create conversation record",
                lambda: self.client.table(self.history_table)
                .insert({"email": email, "conversations": [archived]})
                .execute(),
            )
            return 1

        conversations = [*record.conversations, archived]
        self._run(
            "append to conversation record",
            lambda: self.client.table(self.history_table)
            .update({"conversations": conversations})
            .eq("email", email)
            .execute(),
        )
        return len(conversations)


_message_store: MessageStore | None = None


def get_message_store() -> MessageStore:
    """Get or create the shared MessageStore.

    Returns:
        The process-wide MessageStore instance.
    """
    global _message_store
    if _message_store is None:
        _message_store = MessageStore()
    return _message_store
