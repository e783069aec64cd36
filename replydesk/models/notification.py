"""Notification models for operator-facing status messages."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class NotificationKind(str, Enum):
    """Kind of notification."""

    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def self_expires(self) -> bool:
        """Success and error notices expire on their own; loading ones do not."""
        return self is not NotificationKind.LOADING


class Notification(BaseModel):
    """A transient notice shown to the operator."""

    id: str = Field(..., description="Notification ID")
    kind: NotificationKind = Field(..., description="Kind of notification")
    text: str = Field(..., description="Notification text")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the notice was enqueued"
    )
