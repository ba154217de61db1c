"""
DeepSeekClient: Thin async wrapper around the DeepSeek chat-completion API.

DeepSeek speaks the OpenAI wire format:
    POST {base_url}/chat/completions
    Authorization: Bearer <DEEPSEEK_API_KEY>
    {"model": ..., "messages": [...], "stream": false}

The client never interprets the response and never raises on a non-2xx
status. It hands back status + raw body so the relay can pass either
through unchanged. Transport failures (DNS, timeout, refused) do raise
httpx errors; the chat route turns those into a generic 500.

To swap providers with the same wire format, change DEEPSEEK_BASE_URL.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from chat_relay.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


class DeepSeekClient:
    """
    One instance per process (see main.py); every call opens its own
    httpx.AsyncClient so there is no connection state to manage.
    Redirects are followed, so a relocated DEEPSEEK_BASE_URL still reaches
    the API; httpx drops the Authorization header on cross-host hops.

    `transport` lets tests plug in httpx.MockTransport.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.deepseek.com/v1",
        timeout: float | None = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "DeepSeekClient":
        return cls(
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            timeout=settings.upstream_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def create_chat_completion(self, messages: list[Any], model: str) -> UpstreamResponse:
        """
        Issue one non-streaming chat completion.

        Args:
            messages: Full conversation, system prompt included.
            model:    Upstream model name, e.g. "deepseek-chat".

        Returns:
            UpstreamResponse with the upstream status and untouched body.
        """
        body = {"model": model, "messages": messages, "stream": False}
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            response = await client.post(self.completions_url, headers=headers, json=body)

        logger.debug("DeepSeek responded %d (%d bytes)", response.status_code, len(response.content))
        return UpstreamResponse(status_code=response.status_code, content=response.content)
