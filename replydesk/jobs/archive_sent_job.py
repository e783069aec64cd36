"""Background job to archive delivered messages.

Runs every ARCHIVE_INTERVAL_SECONDS. For each message with status 'sent',
appends it to the sender's conversation record in the history table and
then deletes it from the active table. A message whose append fails is
left in place and picked up by the next sweep.
"""

import logging
from typing import Any

from replydesk.db.supabase import MessageStore, get_message_store
from replydesk.models.message import MessageStatus
from replydesk.services.lifecycle import LifecycleStateMachine

logger = logging.getLogger(__name__)


async def run_archive_sent(store: MessageStore | None = None) -> dict[str, Any]:
    """Move every sent message into per-customer history.

    Args:
        store: Message store to sweep (defaults to the shared store).

    Returns:
        Dict with statistics about the archive run.
    """
    stats: dict[str, Any] = {
        "total_checked": 0,
        "archived": 0,
        "failed": 0,
    }

    try:
        store = store or get_message_store()
        lifecycle = LifecycleStateMachine(store)

        sent = await store.find_by_status(MessageStatus.SENT.value)
        if not sent:
            logger.debug("ARCHIVE_SENT: No sent messages to archive")
            return stats

        stats["total_checked"] = len(sent)
        logger.info("ARCHIVE_SENT: Archiving %d sent messages", len(sent))

        for document in sent:
            message_id = document.get("id")
            try:
                await lifecycle.archive(document)
                stats["archived"] += 1
            except Exception as e:
                logger.warning(
                    "ARCHIVE_SENT: Failed to archive message %s: %s",
                    message_id,
                    e,
                    exc_info=True,
                )
                stats["failed"] += 1

        logger.info(
            "ARCHIVE_SENT: Complete. Checked: %d, Archived: %d, Failed: %d",
            stats["total_checked"],
            stats["archived"],
            stats["failed"],
        )

    except Exception as e:
        logger.error("ARCHIVE_SENT: Job failed: %s", e, exc_info=True)
        stats["failed"] += 1

    return stats
