"""Message API routes: working-set reads and send-by-id."""

import logging

from fastapi import APIRouter

from replydesk.models.message import Message, SendRequest, SendResponse
from replydesk.services.dispatch import get_dispatch_service
from replydesk.services.ingestion import get_ingestion_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["messages"])


@router.get("/messages/onscreen", response_model=list[Message])
async def list_onscreen_messages() -> list[Message]:
    """List every message already presented to the operator.

    Used once at session start to seed the working set. Does not change
    any message status.

    Returns:
        Onscreen messages, oldest first.
    """
    messages = await get_ingestion_service().fetch_onscreen()
    logger.debug("Onscreen messages listed", extra={"count": len(messages)})
    return messages


@router.get("/messages/pending", response_model=list[Message])
async def claim_pending_messages() -> list[Message]:
    """Claim newly arrived messages for the operator.

    Moves each returned message from pending to onscreen; a message is
    returned by at most one call.

    Returns:
        Newly claimed messages, oldest first.
    """
    return await get_ingestion_service().claim_pending()


@router.post("/send-email/{message_id}", response_model=SendResponse)
async def send_email(message_id: str, request: SendRequest | None = None) -> SendResponse:
    """Deliver a message's reply and mark it sent.

    Args:
        message_id: The ID of the message to send.
        request: Optional body carrying the operator-approved reply.

    Returns:
        Delivery outcome.

    Raises:
        NotFoundError: If the message is not active (404).
        InvalidTransitionError: If the message is not onscreen (409).
        DeliveryFailure: If delivery failed; status stays onscreen (502).
    """
    reply = request.reply if request else None
    return await get_dispatch_service().send(message_id, reply)
