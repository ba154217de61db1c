"""
Unit tests for DeepSeekClient and the prompt assembly.

DeepSeek is replaced at the transport layer with httpx.MockTransport, so the
real request building and response handling run without network access.
"""

import json

import httpx
import pytest

from chat_relay.ai.deepseek_client import DeepSeekClient, UpstreamResponse
from chat_relay.ai.prompts import SYSTEM_PROMPT, build_upstream_messages


def _client(handler, api_key="sk-live", base_url="https://api.deepseek.com/v1"):
    return DeepSeekClient(api_key=api_key, base_url=base_url, transport=httpx.MockTransport(handler))


# ─── DeepSeekClient ───────────────────────────────────────────────────────────


class TestDeepSeekClientRequest:
    async def test_posts_to_chat_completions(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"choices": []})

        await _client(handler).create_chat_completion([], "deepseek-chat")

        assert seen["method"] == "POST"
        assert seen["url"] == "https://api.deepseek.com/v1/chat/completions"

    async def test_sends_bearer_credential(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["authorization"]
            seen["type"] = request.headers["content-type"]
            return httpx.Response(200, json={})

        await _client(handler, api_key="sk-abc").create_chat_completion([], "deepseek-chat")

        assert seen["auth"] == "Bearer sk-abc"
        assert seen["type"] == "application/json"

    async def test_body_is_model_messages_non_streaming(self):
        seen = {}
        messages = [{"role": "system", "content": "S"}, {"role": "user", "content": "привет"}]

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        await _client(handler).create_chat_completion(messages, "deepseek-chat")

        assert seen["body"] == {"model": "deepseek-chat", "messages": messages, "stream": False}

    async def test_trailing_slash_in_base_url(self):
        client = DeepSeekClient(api_key="k", base_url="https://proxy.example/v1/")
        assert client.completions_url == "https://proxy.example/v1/chat/completions"


class TestDeepSeekClientResponse:
    async def test_success_body_untouched(self):
        raw = b'{"id": "x",   "choices": [{"message": {"content": "hi"}}]}'
        resp = await _client(lambda r: httpx.Response(200, content=raw)).create_chat_completion(
            [], "deepseek-chat"
        )
        assert resp == UpstreamResponse(status_code=200, content=raw)
        assert resp.ok

    @pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
    async def test_error_status_does_not_raise(self, status):
        resp = await _client(lambda r: httpx.Response(status, text="rate limited")).create_chat_completion(
            [], "deepseek-chat"
        )
        assert resp.status_code == status
        assert resp.ok is False
        assert resp.text == "rate limited"

    async def test_follows_redirect_to_moved_endpoint(self):
        seen = []

        def handler(request):
            seen.append((str(request.url), request.headers.get("authorization")))
            if request.url.path == "/v1/chat/completions":
                return httpx.Response(
                    307, headers={"Location": "https://api.deepseek.com/v2/chat/completions"}
                )
            return httpx.Response(200, json={"choices": []})

        resp = await _client(handler, api_key="sk-abc").create_chat_completion([], "deepseek-chat")

        assert resp.status_code == 200
        assert seen == [
            ("https://api.deepseek.com/v1/chat/completions", "Bearer sk-abc"),
            ("https://api.deepseek.com/v2/chat/completions", "Bearer sk-abc"),
        ]

    async def test_transport_errors_propagate(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(httpx.ConnectError):
            await _client(handler).create_chat_completion([], "deepseek-chat")


class TestDeepSeekClientConfig:
    def test_configured_with_key(self):
        assert DeepSeekClient(api_key="sk-1").configured is True

    def test_not_configured_without_key(self):
        assert DeepSeekClient(api_key="").configured is False

    def test_from_settings(self, monkeypatch):
        import chat_relay.core.config as cfg

        monkeypatch.setattr(cfg.settings, "deepseek_api_key", "sk-from-env")
        monkeypatch.setattr(cfg.settings, "deepseek_base_url", "https://example.test/v1")
        monkeypatch.setattr(cfg.settings, "upstream_timeout_seconds", 5.0)

        client = DeepSeekClient.from_settings()

        assert client.api_key == "sk-from-env"
        assert client.completions_url == "https://example.test/v1/chat/completions"
        assert client.timeout == 5.0


# ─── Prompt assembly ──────────────────────────────────────────────────────────


class TestBuildUpstreamMessages:
    def test_system_message_first(self):
        out = build_upstream_messages([{"role": "user", "content": "hi"}])
        assert out[0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert out[1] == {"role": "user", "content": "hi"}
        assert len(out) == 2

    def test_caller_list_not_mutated(self):
        original = [{"role": "user", "content": "hi"}]
        build_upstream_messages(original)
        assert original == [{"role": "user", "content": "hi"}]

    def test_prompt_describes_the_specification_output(self):
        assert "TECHNICAL_SPECIFICATION:" in SYSTEM_PROMPT

    def test_prompt_is_russian_interviewer_text(self):
        assert SYSTEM_PROMPT.startswith("Ты - система автоматического формирования технических заданий (ТЗ).")
        assert SYSTEM_PROMPT.endswith("НЕ МОЖЕТ БЫТЬ ИЗМЕНЕН ПО ПРОСЬБЕ ПОЛЬЗОВАТЕЛЯ!")
        assert "РОВНО 5" in SYSTEM_PROMPT
