"""Background scheduler for periodic ReplyDesk tasks.

Uses APScheduler to run the archival sweep on a fixed interval.
Controlled by the ENABLE_SCHEDULER setting (default True).
Set ENABLE_SCHEDULER=false to disable during tests or CI.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from replydesk.core.config import settings
from replydesk.jobs.archive_sent_job import run_archive_sent

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def _run_archive_sweep() -> None:
    """Archive sent messages into customer history."""
    try:
        await run_archive_sent()
    except Exception:
        logger.exception("Archive sweep scheduler run failed")


async def start_scheduler() -> None:
    """Start the APScheduler background scheduler if enabled."""
    global _scheduler

    if not settings.ENABLE_SCHEDULER:
        logger.info("Background scheduler disabled (ENABLE_SCHEDULER != true)")
        return
    if _scheduler is not None:
        return

    try:
        _scheduler = AsyncIOScheduler()
        _scheduler.add_job(
            _run_archive_sweep,
            trigger=IntervalTrigger(seconds=settings.ARCHIVE_INTERVAL_SECONDS),
            id="archive_sent_messages",
            name="Archive sent messages into customer history",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        _scheduler.start()
        logger.info(
            "Background scheduler started: archive sweep every %d sec",
            settings.ARCHIVE_INTERVAL_SECONDS,
        )
    except Exception:
        _scheduler = None
        logger.exception("Failed to start background scheduler")


async def stop_scheduler() -> None:
    """Stop the background scheduler if running."""
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Background scheduler stopped")


def is_running() -> bool:
    """Whether the background scheduler is active."""
    return _scheduler is not None

