#!/usr/bin/env python3
"""Seed the active messages table with sample pending messages.

Usage:
    python scripts/seed_messages.py --count 10
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

# Load environment before settings are read
load_dotenv()

from replydesk.core.exceptions import DatabaseError  # noqa: E402
from replydesk.db.seed import seed_messages  # noqa: E402
from replydesk.db.supabase import get_message_store  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed sample pending support messages")
    parser.add_argument(
        "--count",
        type=int,
        default=5,
        help="Number of messages to insert (default: 5)",
    )
    args = parser.parse_args()

    try:
        inserted = asyncio.run(seed_messages(get_message_store(), args.count))
    except DatabaseError as e:
        logger.error("Seeding failed: %s", e.message)
        return 1

    logger.info("Done. %d messages are waiting to be claimed.", inserted)
    return 0


if __name__ == "__main__":
    sys.exit(main())
