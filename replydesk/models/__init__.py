"""Pydantic models for ReplyDesk."""

from replydesk.models.message import (
    ConversationRecord,
    Message,
    MessageStatus,
    SendRequest,
    SendResponse,
)
from replydesk.models.notification import Notification, NotificationKind
from replydesk.models.tone import ToneAttributes

__all__ = [
    "ConversationRecord",
    "Message",
    "MessageStatus",
    "Notification",
    "NotificationKind",
    "SendRequest",
    "SendResponse",
    "ToneAttributes",
]
