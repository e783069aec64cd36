"""HTTP client the operator session uses to reach the ReplyDesk API."""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from replydesk.core.config import settings
from replydesk.core.exceptions import DeliveryFailure, ExternalServiceError
from replydesk.models.message import Message

logger = logging.getLogger(__name__)

_message_list = TypeAdapter(list[Message])


class BackendClient:
    """Thin async wrapper over the messages API.

    Args:
        base_url: API root (defaults to ``API_BASE_URL``).
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.WEBHOOK_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_messages(self, path: str) -> list[Message]:
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            return _message_list.validate_python(response.json())
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                "replydesk-api", f"GET {path} returned {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise ExternalServiceError("replydesk-api", f"GET {path} failed: {e}") from e
        except (ValueError, PydanticValidationError) as e:
            raise ExternalServiceError("replydesk-api", f"GET {path} returned malformed data") from e

    async def fetch_onscreen(self) -> list[Message]:
        """Every message already presented (no status change)."""
        return await self._get_messages("/messages/onscreen")

    async def fetch_pending(self) -> list[Message]:
        """Newly claimed messages (the server moves them to onscreen)."""
        return await self._get_messages("/messages/pending")

    async def send_message(self, message_id: str, reply: str) -> Any:
        """Ask the API to deliver a message.

        Returns:
            The delivery channel's result as echoed by the API.

        Raises:
            DeliveryFailure: Transport error, non-2xx, malformed body, or
                ``success`` not true.
        """
        try:
            response = await self._client.post(f"/send-email/{message_id}", json={"reply": reply})
            data = response.json()
        except httpx.RequestError as e:
            raise DeliveryFailure(f"Send request failed: {e}", message_id=message_id) from e
        except ValueError as e:
            raise DeliveryFailure("Malformed send response", message_id=message_id) from e

        if not response.is_success or not isinstance(data, dict) or data.get("success") is not True:
            detail = data.get("detail") if isinstance(data, dict) else None
            raise DeliveryFailure(
                detail or f"Send failed with status {response.status_code}", message_id=message_id
            )
        return data.get("delivery_result")
