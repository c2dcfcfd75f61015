"""Unit tests for the chat completion client"""

import json

import httpx
import pytest

from demo_bank.domain.exceptions import ChatNotConfigured, UpstreamError
from demo_bank.infrastructure.clients.chat import ChatClient

MESSAGES = [{"role": "user", "content": "What is my balance?"}]


def make_client(handler) -> ChatClient:
    return ChatClient(
        api_key="hf_test",
        api_url="https://chat.test/v1/chat/completions",
        model="test-model",
        transport=httpx.MockTransport(handler),
    )


async def test_missing_api_key_raises():
    client = ChatClient(api_key="")
    with pytest.raises(ChatNotConfigured) as exc_info:
        await client.complete(MESSAGES)

    assert exc_info.value.http_status == 500
    assert exc_info.value.message == "AI service not configured"


async def test_successful_completion_is_passed_through():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "Hi"}}]})

    status, body = await make_client(handler).complete(MESSAGES)

    assert status == 200
    assert body["choices"][0]["message"]["content"] == "Hi"
    assert seen["auth"] == "Bearer hf_test"
    assert seen["body"] == {"model": "test-model", "messages": MESSAGES, "stream": False}


async def test_upstream_error_status_and_json_body_passed_through():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": "rate limited"})

    status, body = await make_client(handler).complete(MESSAGES)

    assert status == 429
    assert body == {"error": "rate limited"}


async def test_upstream_plain_text_error_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    status, body = await make_client(handler).complete(MESSAGES)

    assert status == 502
    assert body == {"error": "Bad Gateway"}


async def test_unreachable_service_raises_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as exc_info:
        await make_client(handler).complete(MESSAGES)

    assert exc_info.value.message == "Failed to connect to AI service"
