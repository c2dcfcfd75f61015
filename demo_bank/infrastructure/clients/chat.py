"""Chat completion HTTP client for the AI assistant proxy"""

import json
import logging
from typing import Any, Dict, List, Tuple

import httpx

from demo_bank.config import settings
from demo_bank.domain.exceptions import ChatNotConfigured, UpstreamError
from demo_bank.infrastructure.observability.metrics import chat_upstream_failures_counter


class ChatClient:
    """Client for an OpenAI-compatible chat completion API"""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.huggingface_api_key
        self.api_url = api_url or settings.chat_api_url
        self.model = model or settings.chat_model
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def complete(self, messages: List[Dict[str, Any]]) -> Tuple[int, Any]:
        """
        Forward a conversation to the chat service.

        Non-2xx responses are passed through: the upstream status is returned
        along with its JSON body, or ``{"error": <text>}`` when the body is
        not JSON.

        Returns:
            (status_code, body)

        Raises:
            ChatNotConfigured: No API key is configured
            UpstreamError: The service could not be reached or timed out
        """
        if not self.api_key:
            raise ChatNotConfigured()

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"model": self.model, "messages": messages, "stream": False},
                )
            except httpx.TimeoutException as e:
                chat_upstream_failures_counter.inc()
                raise UpstreamError(f"AI service timeout after {self.timeout}s") from e
            except httpx.RequestError as e:
                chat_upstream_failures_counter.inc()
                logging.error(f"AI proxy error: {e}")
                raise UpstreamError() from e

        if response.is_success:
            try:
                return response.status_code, response.json()
            except json.JSONDecodeError as e:
                chat_upstream_failures_counter.inc()
                raise UpstreamError("Invalid response from AI service") from e

        chat_upstream_failures_counter.inc()
        logging.warning(f"AI service returned {response.status_code}")
        try:
            body = response.json()
        except json.JSONDecodeError:
            body = {"error": response.text or "Unknown API error"}
        return response.status_code, body
