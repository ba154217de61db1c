"""
FastAPI dependencies for the shared, process-wide collaborators.

Both objects are created in main.py and parked on app.state; routes reach
them through these functions so tests can swap them with
app.dependency_overrides instead of patching globals.
"""

from fastapi import Request

from chat_relay.ai.deepseek_client import DeepSeekClient
from chat_relay.core.rate_limit import DailyRateLimiter


def get_rate_limiter(request: Request) -> DailyRateLimiter:
    return request.app.state.rate_limiter


def get_chat_client(request: Request) -> DeepSeekClient:
    return request.app.state.chat_client
