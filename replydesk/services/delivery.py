"""Outbound delivery webhook client."""

import logging
from typing import Any

import httpx
from fastapi.encoders import jsonable_encoder

from replydesk.core.circuit_breaker import CircuitBreakerOpen, delivery_circuit_breaker
from replydesk.core.config import settings
from replydesk.core.exceptions import DeliveryFailure

logger = logging.getLogger(__name__)


class DeliveryChannel:
    """Posts a finalized message to the delivery webhook.

    Args:
        url: Webhook URL (defaults to ``DELIVERY_WEBHOOK_URL``).
        timeout: Request timeout in seconds.
        client: Optional shared ``httpx.AsyncClient``; one is opened per call
            when omitted.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url or settings.DELIVERY_WEBHOOK_URL
        self.timeout = timeout if timeout is not None else settings.WEBHOOK_TIMEOUT_SECONDS
        self._client = client

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.url, json=payload, timeout=self.timeout)
        async with httpx.AsyncClient() as client:
            return await client.post(self.url, json=payload, timeout=self.timeout)

    async def deliver(self, document: dict[str, Any]) -> Any:
        """Deliver one message.

        Args:
            document: The full stored message, with ``llm_reply`` set to the
                final reply text.

        Returns:
            The webhook's JSON result.

        Raises:
            DeliveryFailure: Transport error, non-2xx status, non-JSON body,
                or a result whose ``success`` flag is false.
        """
        message_id = str(document.get("id", ""))
        try:
            delivery_circuit_breaker.check()
        except CircuitBreakerOpen as e:
            raise DeliveryFailure(str(e), message_id=message_id) from e

        try:
            response = await self._post(jsonable_encoder(document))
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as e:
            delivery_circuit_breaker.record_failure()
            logger.error(
                "Delivery webhook returned %s for message %s",
                e.response.status_code,
                message_id,
            )
            raise DeliveryFailure(
                f"Delivery webhook returned {e.response.status_code}", message_id=message_id
            ) from e
        except httpx.RequestError as e:
            delivery_circuit_breaker.record_failure()
            logger.error("Delivery webhook unreachable for message %s: %s", message_id, e)
            raise DeliveryFailure(f"Delivery webhook unreachable: {e}", message_id=message_id) from e
        except ValueError as e:
            delivery_circuit_breaker.record_failure()
            logger.error("Delivery webhook sent a malformed response for message %s", message_id)
            raise DeliveryFailure("Malformed delivery response", message_id=message_id) from e

        if isinstance(result, dict) and result.get("success") is False:
            raise DeliveryFailure(
                str(result.get("message") or "Delivery channel reported failure"),
                message_id=message_id,
            )

        delivery_circuit_breaker.record_success()
        return result


_delivery_channel: DeliveryChannel | None = None


def get_delivery_channel() -> DeliveryChannel:
    """Get or create the DeliveryChannel singleton."""
    global _delivery_channel
    if _delivery_channel is None:
        _delivery_channel = DeliveryChannel()
    return _delivery_channel
