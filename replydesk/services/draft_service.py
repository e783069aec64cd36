"""Client for the draft regeneration webhook."""

import logging
from typing import Any

import httpx

from replydesk.core.circuit_breaker import CircuitBreakerOpen, draft_circuit_breaker
from replydesk.core.config import settings
from replydesk.core.exceptions import DraftFailure
from replydesk.models.message import Message

logger = logging.getLogger(__name__)


def extract_reply(data: Any) -> str | None:
    """Pull the regenerated reply out of a draft service response.

    The pipeline nests the text as ``{"llm_reply": {"llm_reply": "..."}}``.
    """
    if not isinstance(data, dict):
        return None
    outer = data.get("llm_reply")
    if not isinstance(outer, dict):
        return None
    reply = outer.get("llm_reply")
    if not isinstance(reply, str) or not reply.strip():
        return None
    return reply


class DraftServiceClient:
    """Requests a new reply draft for a message.

    Args:
        url: Webhook URL (defaults to ``DRAFT_WEBHOOK_URL``).
        timeout: Request timeout in seconds.
        client: Optional shared ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url or settings.DRAFT_WEBHOOK_URL
        self.timeout = timeout if timeout is not None else settings.WEBHOOK_TIMEOUT_SECONDS
        self._client = client

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.url, json=payload, timeout=self.timeout)
        async with httpx.AsyncClient() as client:
            return await client.post(self.url, json=payload, timeout=self.timeout)

    async def regenerate(self, message: Message, tone: str, customization: str) -> str:
        """Ask the draft service for a new reply.

        Args:
            message: The message being reviewed.
            tone: Combined tone descriptor, e.g. ``"Formal, Short length"``.
            customization: Free-text instructions (typed or dictated).

        Returns:
            The new reply text.

        Raises:
            DraftFailure: If the service is unreachable, errors, or returns no reply.
        """
        try:
            draft_circuit_breaker.check()
        except CircuitBreakerOpen as e:
            raise DraftFailure(str(e)) from e

        payload = {
            "email": message.model_dump(mode="json"),
            "tone": tone,
            "improvement_text": customization,
        }
        try:
            response = await self._post(payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            draft_circuit_breaker.record_failure()
            logger.error("Draft service returned %s", e.response.status_code)
            raise DraftFailure(f"Draft service returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            draft_circuit_breaker.record_failure()
            logger.error("Draft service unreachable: %s", e)
            raise DraftFailure(f"Draft service unreachable: {e}") from e
        except ValueError as e:
            draft_circuit_breaker.record_failure()
            raise DraftFailure("Malformed draft service response") from e

        draft_circuit_breaker.record_success()
        reply = extract_reply(data)
        if reply is None:
            logger.warning("Draft service response had no reply", extra={"message_id": message.id})
            raise DraftFailure("Failed to regenerate reply. No response from AI.")
        return reply
