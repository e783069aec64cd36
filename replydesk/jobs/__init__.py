"""Background jobs for ReplyDesk."""

from replydesk.jobs.archive_sent_job import run_archive_sent

__all__ = ["run_archive_sent"]
