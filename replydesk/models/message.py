"""Pydantic models for support messages.

Stored documents come straight from the document store as dicts; the
``Message`` model is the shape the operator's working set (and the API)
uses.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

NO_SUBJECT = "No Subject"
UNKNOWN_SENDER = "Unknown"


class MessageStatus(str, Enum):
    """Lifecycle status of a support message.

    ``ARCHIVED`` is never written to the active store: an archived message
    lives only in its sender's conversation record.
    """

    PENDING = "pending"
    ONSCREEN = "onscreen"
    SENT = "sent"
    ARCHIVED = "archived"


def sender_display_name(address: str | None) -> str:
    """Derive a display name from the local part of an email address."""
    if not address:
        return UNKNOWN_SENDER
    return address.split("@")[0] or UNKNOWN_SENDER


class Message(BaseModel):
    """A message as presented to the operator."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Store-assigned message ID")
    sender: str = Field("", description="Customer email address")
    sender_name: str = Field(UNKNOWN_SENDER, description="Display name derived from the address")
    subject: str = Field(NO_SUBJECT, description="Email subject")
    customer_email: str = Field("", description="Original customer message body")
    created_at: datetime | None = Field(None, description="When the message was ingested")
    summary: str | None = Field(None, description="AI-generated summary of the customer message")
    reply: str = Field("", description="Current AI reply draft")

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Message":
        """Transform a stored document into the working-set shape."""
        sender = doc.get("client_email") or ""
        return cls(
            id=str(doc["id"]),
            sender=sender,
            sender_name=sender_display_name(sender),
            subject=doc.get("email_subject") or NO_SUBJECT,
            customer_email=doc.get("original_email") or "",
            created_at=doc.get("created_at"),
            summary=doc.get("email_summary"),
            reply=doc.get("llm_reply") or "",
        )

    def with_reply(self, reply: str) -> "Message":
        """Return a copy carrying a new reply draft."""
        return self.model_copy(update={"reply": reply})


class SendRequest(BaseModel):
    """Request body for sending a message."""

    reply: str | None = Field(None, description="Final reply text; stored draft is used when empty")


class SendResponse(BaseModel):
    """Response body for a successful send."""

    success: bool = Field(..., description="Whether delivery succeeded")
    delivery_result: Any = Field(None, description="Raw result returned by the delivery channel")


class ConversationRecord(BaseModel):
    """Per-customer archive of delivered messages."""

    email: str = Field(..., description="Customer email address")
    conversations: list[dict[str, Any]] = Field(
        default_factory=list, description="Archived message documents, oldest first"
    )
