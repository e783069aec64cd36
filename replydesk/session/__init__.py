"""Operator session: working set, notifications, sending and review."""

from replydesk.session.context import AutoSendToken, SessionContext
from replydesk.session.operator import OperatorSession
from replydesk.session.sender import AutoSendBatchProcessor, AutoSendReport, SendCoordinator
from replydesk.session.working_set import WorkingSet

__all__ = [
    "AutoSendBatchProcessor",
    "AutoSendReport",
    "AutoSendToken",
    "OperatorSession",
    "SendCoordinator",
    "SessionContext",
    "WorkingSet",
]
