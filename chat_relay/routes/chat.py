"""
chat.py: The relay endpoint.

Route:
  POST /api/chat  {"messages": [{role, content}, ...]}

Prepends the fixed system prompt, makes exactly one non-streaming DeepSeek
call and returns DeepSeek's JSON body byte-for-byte. No retries, no schema
checks on either side beyond "messages must be an array".

Quota: when RATE_LIMIT_ENFORCED=true the caller's daily quota is checked
before the upstream call and charged only after a successful one. A failed
upstream call is not charged; a charged call is never refunded. The check
and the charge straddle the upstream await, so concurrent requests from one
address can overshoot the limit by the number in flight.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response

from chat_relay.ai.deepseek_client import DeepSeekClient
from chat_relay.ai.prompts import build_upstream_messages
from chat_relay.core.client_identity import get_client_identity
from chat_relay.core.config import settings
from chat_relay.core.dependencies import get_chat_client, get_rate_limiter
from chat_relay.core.errors import (
    ConfigurationError,
    InternalRelayError,
    InvalidRequestError,
    QuotaExceededError,
    RelayError,
    UpstreamError,
)
from chat_relay.core.rate_limit import DailyRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


def _preview(content: Any) -> str:
    text = content if isinstance(content, str) else ("" if content is None else str(content))
    limit = settings.log_preview_chars
    return text[:limit] + ("..." if len(text) > limit else "")


def _log_messages(messages: Any) -> None:
    count = len(messages) if isinstance(messages, list) else 0
    logger.info("Messages count: %d", count)
    if not count:
        return
    for index, msg in enumerate(messages, start=1):
        if isinstance(msg, dict):
            logger.info("  [%d] %s: %s", index, msg.get("role"), _preview(msg.get("content")))
        else:
            logger.info("  [%d] %s", index, _preview(msg))


def _reply_text(content: bytes) -> str:
    """Assistant text from a chat-completion body, "" if it isn't one."""
    try:
        data = json.loads(content)
        return data["choices"][0]["message"]["content"] or ""
    except (ValueError, KeyError, IndexError, TypeError):
        return ""


async def _read_payload(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:  # JSONDecodeError / UnicodeDecodeError
        raise InvalidRequestError("Invalid request. Body must be valid JSON.") from exc


async def _relay(
    request: Request,
    client_id: str,
    limiter: DailyRateLimiter,
    chat_client: DeepSeekClient,
) -> Response:
    logger.info("Received chat request from %s", client_id)

    payload = await _read_payload(request)
    messages = payload.get("messages") if isinstance(payload, dict) else None
    _log_messages(messages)

    if not isinstance(messages, list):
        raise InvalidRequestError()

    if not chat_client.configured:
        logger.error("DEEPSEEK_API_KEY is not set in environment variables")
        raise ConfigurationError()

    enforced = settings.rate_limit_enforced
    if enforced:
        check = limiter.check_limit(client_id)
        if not check.allowed:
            logger.warning(
                "Daily limit reached for %s (%d/%d)", client_id, check.count, limiter.daily_limit
            )
            raise QuotaExceededError(check, limiter.daily_limit)

    upstream_messages = build_upstream_messages(messages)
    model = settings.deepseek_model

    logger.info(
        "Sending request to DeepSeek (url: %s, model: %s, messages: %d)",
        chat_client.completions_url,
        model,
        len(upstream_messages),
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Full request body:\n%s",
            json.dumps(
                {"model": model, "messages": upstream_messages, "stream": False},
                ensure_ascii=False,
                indent=2,
            ),
        )

    upstream = await chat_client.create_chat_completion(upstream_messages, model)

    if not upstream.ok:
        logger.error("DeepSeek API error: %d %s", upstream.status_code, upstream.text)
        raise UpstreamError(upstream.status_code, upstream.text)

    if enforced:
        usage = limiter.increment_limit(client_id)
        logger.info("Charged %s: %d used, %d remaining today", client_id, usage.count, usage.remaining)

    reply = _reply_text(upstream.content)
    logger.info("Received response from DeepSeek (%d chars)", len(reply))
    logger.debug("Full response:\n%s", reply)

    return Response(content=upstream.content, status_code=200, media_type="application/json")


@router.post("/chat", summary="Relay a conversation to DeepSeek")
async def chat(
    request: Request,
    client_id: str = Depends(get_client_identity),
    limiter: DailyRateLimiter = Depends(get_rate_limiter),
    chat_client: DeepSeekClient = Depends(get_chat_client),
) -> Response:
    """
    Forward the conversation with the system prompt prepended.

    Success returns DeepSeek's body unchanged. Errors are JSON with an
    "error" field (see core/errors.py for the status codes).
    """
    try:
        return await _relay(request, client_id, limiter, chat_client)
    except RelayError:
        raise
    except Exception as exc:
        logger.exception("Error processing chat request")
        raise InternalRelayError(str(exc)) from exc
