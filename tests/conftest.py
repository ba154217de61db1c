"""
pytest configuration and shared fixtures for the Chat Relay tests.

Key concern: tests must never reach DeepSeek. We achieve this by:
  1. Replacing the chat client dependency with FakeChatClient, which
     records every call and returns a canned UpstreamResponse.
  2. Giving every test a fresh DailyRateLimiter through the
     rate-limiter dependency, so counters never bleed between tests.

Transport-level tests of DeepSeekClient itself use httpx.MockTransport
(see test_deepseek_client.py).
"""

import json
import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEEPSEEK_API_KEY", "sk-test")

from chat_relay.ai.deepseek_client import UpstreamResponse  # noqa: E402
from chat_relay.core.rate_limit import DailyRateLimiter  # noqa: E402

COMPLETION_BODY = json.dumps(
    {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "model": "deepseek-chat",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "What is the goal of the project?"},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 120, "completion_tokens": 9, "total_tokens": 129},
    }
).encode()


class FakeChatClient:
    """Stand-in for DeepSeekClient that never touches the network."""

    completions_url = "https://deepseek.invalid/v1/chat/completions"

    def __init__(
        self,
        status_code: int = 200,
        content: bytes = COMPLETION_BODY,
        api_key: str = "sk-test",
        exc: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        self.content = content
        self.api_key = api_key
        self.exc = exc
        self.calls: list[dict] = []

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def create_chat_completion(self, messages, model):
        self.calls.append({"messages": messages, "model": model})
        if self.exc is not None:
            raise self.exc
        return UpstreamResponse(status_code=self.status_code, content=self.content)


@pytest.fixture()
def fake_chat_client():
    return FakeChatClient()


@pytest.fixture()
def limiter():
    from chat_relay.core.config import settings

    return DailyRateLimiter(settings.daily_message_limit)


@pytest.fixture()
async def client(fake_chat_client, limiter):
    """
    HTTPX async test client wired to the FastAPI app with fake collaborators.

    Usage:
        async def test_something(client, fake_chat_client):
            response = await client.post("/api/chat", json={"messages": []})
            assert fake_chat_client.calls
    """
    from chat_relay.core.dependencies import get_chat_client, get_rate_limiter
    from chat_relay.main import app

    app.dependency_overrides[get_chat_client] = lambda: fake_chat_client
    app.dependency_overrides[get_rate_limiter] = lambda: limiter

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
