"""Custom exceptions for the ReplyDesk backend and operator session."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Exception type → safe user-facing message mapping
_SAFE_MESSAGES: dict[str, str] = {
    "NotFoundError": "The requested message was not found.",
    "ValidationError": "The provided input is invalid. Please check and try again.",
    "InvalidTransitionError": "This status change is not allowed.",
    "DatabaseError": "A database error occurred. Please try again.",
    "DeliveryFailure": "Failed to send email. Please try again.",
    "DraftFailure": "Error regenerating reply. Please try again.",
    "VoiceCaptureFailure": "Voice input is unavailable.",
    "ExternalServiceError": "An external service is temporarily unavailable.",
    "CircuitBreakerOpen": "A service dependency is temporarily unavailable. Please try again in a moment.",
    "ValueError": "The provided value is invalid.",
}

_DEFAULT_MESSAGE = "An error occurred. Please try again."


def sanitize_error(e: Exception) -> str:
    """Map an exception to a safe, user-facing error message.

    Logs nothing and leaks nothing: only a generic message for the most
    specific known type in the exception's MRO is returned.

    Args:
        e: The exception to sanitize.

    Returns:
        A safe, generic error message string.
    """
    for cls in type(e).__mro__:
        safe_msg = _SAFE_MESSAGES.get(cls.__name__)
        if safe_msg:
            return safe_msg

    return _DEFAULT_MESSAGE


class ReplyDeskError(Exception):
    """Base exception for all ReplyDesk-specific errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ReplyDesk exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            status_code: HTTP status code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}


class NotFoundError(ReplyDeskError):
    """Resource not found error (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        """Initialize not found error.

        Args:
            resource: Name of the resource that was not found.
            resource_id: Optional ID of the resource.
        """
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource, "resource_id": resource_id},
        )


class ValidationError(ReplyDeskError):
    """Input validation error (400)."""

    def __init__(
        self, message: str, field: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        """Initialize validation error.

        Args:
            message: Error message.
            field: Name of the invalid field.
            details: Additional validation details.
        """
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=error_details,
        )


class InvalidTransitionError(ReplyDeskError):
    """Lifecycle transition that is not forward-by-one (409)."""

    def __init__(self, from_status: str, to_status: str) -> None:
        """Initialize invalid transition error.

        Args:
            from_status: Current status.
            to_status: Requested status.
        """
        super().__init__(
            message=f"Cannot transition message from '{from_status}' to '{to_status}'",
            code="INVALID_TRANSITION",
            status_code=409,
            details={"from_status": from_status, "to_status": to_status},
        )


class DatabaseError(ReplyDeskError):
    """Database operation error (500)."""

    def __init__(self, message: str = "A database error occurred") -> None:
        """Initialize database error.

        Args:
            message: Error message.
        """
        super().__init__(
            message=message,
            code="DATABASE_ERROR",
            status_code=500,
        )


class ExternalServiceError(ReplyDeskError):
    """External service error (502)."""

    def __init__(
        self, service: str, message: str | None = None, code: str = "EXTERNAL_SERVICE_ERROR"
    ) -> None:
        """Initialize external service error.

        Args:
            service: Name of the external service.
            message: Optional error message.
            code: Machine-readable error code.
        """
        error_message = message or f"Error communicating with {service}"
        super().__init__(
            message=error_message,
            code=code,
            status_code=502,
            details={"service": service},
        )


class DeliveryFailure(ExternalServiceError):
    """Delivery channel unreachable, non-success, or malformed response (502)."""

    def __init__(self, message: str | None = None, message_id: str | None = None) -> None:
        """Initialize delivery failure.

        Args:
            message: Error details.
            message_id: ID of the message whose delivery failed.
        """
        super().__init__(
            service="delivery",
            message=message or "Delivery channel rejected the message",
            code="DELIVERY_FAILED",
        )
        self.message_id = message_id
        if message_id:
            self.details["message_id"] = message_id


class DraftFailure(ExternalServiceError):
    """Draft service unreachable or response missing the reply text (502)."""

    def __init__(self, message: str | None = None) -> None:
        """Initialize draft failure.

        Args:
            message: Error details.
        """
        super().__init__(
            service="draft",
            message=message or "Draft service returned no reply",
            code="DRAFT_FAILED",
        )


class VoiceCaptureFailure(ReplyDeskError):
    """Voice capture unsupported, denied, or empty (400).

    Raised by capture callables; never affects in-flight message state.
    """

    def __init__(self, reason: str, message: str | None = None) -> None:
        """Initialize voice capture failure.

        Args:
            reason: Short reason tag (``unsupported``, ``denied``, ``no_speech``).
            message: Optional human-readable message.
        """
        super().__init__(
            message=message or f"Voice capture failed: {reason}",
            code="VOICE_CAPTURE_FAILED",
            status_code=400,
            details={"reason": reason},
        )
        self.reason = reason
