"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading. The upstream credential is injected via environment,
never hard-coded.

To extend: add new fields here and document them in .env.example.
See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    environment: str = "development"
    debug: bool = False

    # ─── Server ────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 3000

    # ─── Rate limiting ─────────────────────────────────────────────
    # Messages per originating address per UTC calendar day.
    daily_message_limit: int = 10

    # The relay only consults the limiter when this is True.
    # Left False the limiter is still built, swept and reported via /api/usage.
    rate_limit_enforced: bool = False

    # How often stale usage records are dropped from memory.
    rate_limit_sweep_interval_seconds: float = 3600.0

    # ─── Upstream (DeepSeek) ───────────────────────────────────────
    # Get from https://platform.deepseek.com/
    deepseek_api_key: str = ""

    # deepseek-chat is the cheap chat model; avoid the reasoner models here.
    deepseek_model: str = "deepseek-chat"
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    upstream_timeout_seconds: float = 120.0

    # ─── CORS ──────────────────────────────────────────────────────
    # Comma-separated allowed origins. "*" lets any front-end call the relay.
    cors_origins_str: str = "*"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # ─── Logging ───────────────────────────────────────────────────
    # Message previews in the log are cut to this many characters.
    log_preview_chars: int = 200

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
    )


# Module-level singleton. Import this everywhere instead of instantiating Settings()
settings = Settings()
