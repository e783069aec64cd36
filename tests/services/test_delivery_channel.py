"""Tests for the delivery webhook client."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from conftest import make_document

from replydesk.core.circuit_breaker import CircuitState, delivery_circuit_breaker
from replydesk.core.exceptions import DeliveryFailure
from replydesk.services.delivery import DeliveryChannel


def _channel(handler) -> DeliveryChannel:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DeliveryChannel(url="http://hooks.test/send-email", timeout=5, client=client)


class TestDeliveryChannel:
    """Tests for DeliveryChannel.deliver."""

    @pytest.mark.asyncio
    async def test_posts_full_document_and_returns_result(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "messageId": "abc"})

        result = await _channel(handler).deliver(make_document("1", status="onscreen"))

        assert result == {"success": True, "messageId": "abc"}
        assert bodies[0]["id"] == "1"
        assert bodies[0]["llm_reply"] == "Draft reply 1"
        assert bodies[0]["client_email"] == "customer1@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, text="boom"),
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"success": False, "message": "mailbox full"}),
        ],
    )
    async def test_failures_raise_delivery_failure(self, response: httpx.Response) -> None:
        with pytest.raises(DeliveryFailure) as exc_info:
            await _channel(lambda request: response).deliver(make_document("7"))

        assert exc_info.value.message_id == "7"
        assert exc_info.value.code == "DELIVERY_FAILED"

    @pytest.mark.asyncio
    async def test_unreachable_webhook_raises_delivery_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(DeliveryFailure):
            await _channel(handler).deliver(make_document("1"))

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        channel = _channel(handler)
        for _ in range(delivery_circuit_breaker.failure_threshold):
            with pytest.raises(DeliveryFailure):
                await channel.deliver(make_document("1"))

        assert delivery_circuit_breaker.state == CircuitState.OPEN
        with pytest.raises(DeliveryFailure):
            await channel.deliver(make_document("1"))
        assert len(calls) == delivery_circuit_breaker.failure_threshold

    @pytest.mark.asyncio
    async def test_opens_client_per_call_when_none_shared(self) -> None:
        mock_response = MagicMock()
        mock_response.json.return_value = {"success": True}
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        mock_client.post.return_value = mock_response

        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await DeliveryChannel(url="http://hooks.test/send-email").deliver(
                make_document("1")
            )

        assert result == {"success": True}
        assert mock_client.post.await_args.args[0] == "http://hooks.test/send-email"
        mock_client.__aexit__.assert_awaited_once()
