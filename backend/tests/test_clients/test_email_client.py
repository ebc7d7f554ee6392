"""Tests for the transactional email HTTP client."""

import json

import pytest
import respx
from httpx import Response

from pictoria.clients.email_client import EmailClient
from pictoria.errors import UpstreamError


@pytest.mark.asyncio
async def test_send_posts_message_and_returns_id():
    client = EmailClient(api_key="re_key", sender="Pictoria AI <noreply@pictoria.ai>", base_url="https://mail.test")

    with respx.mock:
        route = respx.post("https://mail.test/emails").mock(return_value=Response(200, json={"id": "em_1"}))
        message_id = await client.send(["ada@example.com"], "Model training completed", "<p>done</p>")

    assert message_id == "em_1"
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer re_key"
    assert json.loads(request.content) == {
        "from": "Pictoria AI <noreply@pictoria.ai>",
        "to": ["ada@example.com"],
        "subject": "Model training completed",
        "html": "<p>done</p>",
    }

    await client.close()


@pytest.mark.asyncio
async def test_send_rejected_raises_upstream_error():
    client = EmailClient(api_key="bad", sender="noreply@pictoria.ai", base_url="https://mail.test")

    with respx.mock:
        respx.post("https://mail.test/emails").mock(return_value=Response(403, json={"message": "API key is invalid"}))

        with pytest.raises(UpstreamError) as exc_info:
            await client.send(["ada@example.com"], "s", "h")

    assert exc_info.value.step == "email.send"
    assert exc_info.value.retryable is False
    assert "API key is invalid" in exc_info.value.message

    await client.close()
