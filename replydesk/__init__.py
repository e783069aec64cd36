"""ReplyDesk - support-reply triage backend and operator session engine."""

__version__ = "1.0.0"
