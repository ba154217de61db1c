"""Run the relay with uvicorn: `python -m chat_relay` (or the `chat-relay` script)."""

import uvicorn

from chat_relay.core.config import settings


def main() -> None:
    uvicorn.run(
        "chat_relay.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
