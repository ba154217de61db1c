"""
Health check endpoint.

Used by:
  - Docker HEALTHCHECK instruction
  - Load balancers / orchestrators
  - Front-end to check relay connectivity

Liveness only: it does not call DeepSeek, so a missing or revoked key
still reports "ok".
"""

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    status: str  # Always "ok" if the process is alive


@router.get("", response_model=HealthResponse, summary="Relay health check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")
