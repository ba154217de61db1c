"""
Chat Relay: Application entry point.

Bootstraps FastAPI, wires up middleware, registers route groups and owns
the lifecycle of the two process-wide collaborators:

  - app.state.rate_limiter: DailyRateLimiter (sweeper started/stopped in lifespan)
  - app.state.chat_client: DeepSeekClient

Extension points:
  - Add new route groups with app.include_router() below
  - Add new middleware in the middleware block
  - Change startup behaviour in the lifespan context manager
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_relay.ai.deepseek_client import DeepSeekClient
from chat_relay.core.config import settings
from chat_relay.core.errors import RelayError
from chat_relay.core.rate_limit import DailyRateLimiter
from chat_relay.routes.chat import router as chat_router
from chat_relay.routes.health import router as health_router
from chat_relay.routes.usage import router as usage_router

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Code before `yield` runs on startup; code after runs on shutdown.

    Usage counters live only for the life of the process; shutdown drops them.
    """
    logger.info(
        "Starting Chat Relay (env: %s, daily limit: %d, enforced: %s)",
        settings.environment,
        app.state.rate_limiter.daily_limit,
        settings.rate_limit_enforced,
    )
    if not app.state.chat_client.configured:
        logger.warning("DEEPSEEK_API_KEY not set, /api/chat will answer 500 until it is")
    app.state.rate_limiter.start_sweeper(settings.rate_limit_sweep_interval_seconds)
    yield
    logger.info("Shutting down Chat Relay")
    await app.state.rate_limiter.close()


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Chat Relay",
    description="Forwards chat conversations to DeepSeek with a fixed system prompt.",
    version="0.1.0",
    lifespan=lifespan,
    # Disable docs in production to reduce attack surface
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)

app.state.rate_limiter = DailyRateLimiter(settings.daily_message_limit)
app.state.chat_client = DeepSeekClient.from_settings()


# ─── Errors ────────────────────────────────────────────────────────────────────
@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


# ─── Middleware ─────────────────────────────────────────────────────────────────
# CORS: any front-end may call the relay by default.
# In production, restrict CORS_ORIGINS_STR to your actual domain.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """One access-log line per request: method, path, status, duration."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %d (%.0fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(chat_router)
app.include_router(usage_router)


@app.get("/", tags=["root"])
async def root():
    """Relay root, basic metadata."""
    return {
        "name": "Chat Relay",
        "version": "0.1.0",
        "status": "running",
        "environment": settings.environment,
        "health": "/health",
    }
