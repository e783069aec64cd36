"""Backend services for ReplyDesk."""
