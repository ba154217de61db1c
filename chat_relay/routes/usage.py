"""
usage.py: Quota reporting.

Route:
  GET /api/usage: the caller's quota for today, read with check_limit()
  so looking never costs a message.
"""

from fastapi import APIRouter, Depends

from chat_relay.core.client_identity import get_client_identity
from chat_relay.core.config import settings
from chat_relay.core.dependencies import get_rate_limiter
from chat_relay.core.rate_limit import DailyRateLimiter
from chat_relay.models.usage import UsageResponse

router = APIRouter(prefix="/api", tags=["usage"])


@router.get("/usage", response_model=UsageResponse, summary="Today's quota for the caller")
async def get_usage(
    client_id: str = Depends(get_client_identity),
    limiter: DailyRateLimiter = Depends(get_rate_limiter),
) -> UsageResponse:
    check = limiter.check_limit(client_id)
    return UsageResponse(
        identifier=client_id,
        limit=limiter.daily_limit,
        count=check.count,
        remaining=check.remaining,
        allowed=check.allowed,
        enforced=settings.rate_limit_enforced,
    )
