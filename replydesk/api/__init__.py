"""HTTP API for ReplyDesk."""
