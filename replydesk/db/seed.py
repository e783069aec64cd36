"""Sample pending messages for local development."""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from replydesk.db.supabase import MessageStore
from replydesk.models.message import MessageStatus

logger = logging.getLogger(__name__)

SAMPLE_INQUIRIES = [
    (
        "Where is my order?",
        "Hi, I ordered a desk lamp last week and it still hasn't shipped. Can you check?",
        "Customer asks for the shipping status of a desk lamp order.",
        "Thanks for reaching out! Your lamp ships tomorrow and you'll get tracking by email.",
    ),
    (
        "Refund request",
        "The chair arrived with a cracked leg. I'd like a refund please.",
        "Customer received a damaged chair and wants a refund.",
        "Sorry about the damaged chair. I've started a full refund; expect it in 3-5 days.",
    ),
    (
        None,
        "Do you ship to Canada?",
        "Customer asks whether international shipping to Canada is available.",
        "Yes, we ship to Canada. Delivery usually takes 7-10 business days.",
    ),
]


def build_sample_documents(count: int, now: datetime | None = None) -> list[dict[str, Any]]:
    """Build ``count`` pending documents, one minute apart, oldest first."""
    now = now or datetime.now(UTC)
    documents = []
    for i in range(count):
        subject, body, summary, reply = SAMPLE_INQUIRIES[i % len(SAMPLE_INQUIRIES)]
        documents.append(
            {
                "id": str(uuid.uuid4()),
                "client_email": f"customer{i + 1}@example.com",
                "email_subject": subject,
                "original_email": body,
                "email_summary": summary,
                "llm_reply": reply,
                "status": MessageStatus.PENDING.value,
                "created_at": (now - timedelta(minutes=count - i)).isoformat(),
            }
        )
    return documents


async def seed_messages(store: MessageStore, count: int = 5) -> int:
    """Insert sample pending messages.

    Returns:
        Number of messages inserted.
    """
    inserted = 0
    for document in build_sample_documents(count):
        await store.insert(document)
        inserted += 1
    logger.info("Inserted %d pending messages into %s", inserted, store.messages_table)
    return inserted
