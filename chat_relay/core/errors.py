"""
Relay error hierarchy.

Every failure the chat endpoint can report is a RelayError carrying its
HTTP status and JSON payload. main.py registers one exception handler that
turns them into responses, so routes only ever `raise`.

    400  InvalidRequestError   client sent no usable conversation
    500  ConfigurationError    upstream credential missing (operator fix)
    ***  UpstreamError         upstream's own status + raw body, no retry
    429  QuotaExceededError    daily limit reached (enforcement on only)
    500  InternalRelayError    anything unexpected, caught at the route
"""

from typing import Any

from chat_relay.core.rate_limit import LimitCheck


class RelayError(Exception):
    """Base exception for all errors surfaced by the relay."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, error: str | None = None) -> None:
        if error is not None:
            self.error = error
        super().__init__(self.error)

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error}


class InvalidRequestError(RelayError):
    status_code = 400
    error = "Invalid request. Messages array is required."


class ConfigurationError(RelayError):
    status_code = 500
    error = "Server configuration error"


class UpstreamError(RelayError):
    """Non-success response from the chat-completion API."""

    error = "Failed to get response from AI service"

    def __init__(self, status_code: int, details: str) -> None:
        super().__init__()
        self.status_code = status_code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error, "details": self.details}


class QuotaExceededError(RelayError):
    status_code = 429
    error = "Daily message limit exceeded. Please try again tomorrow."

    def __init__(self, check: LimitCheck, limit: int) -> None:
        super().__init__()
        self.check = check
        self.limit = limit

    def to_payload(self) -> dict[str, Any]:
        return {
            "error": self.error,
            "limit": self.limit,
            "count": self.check.count,
            "remaining": self.check.remaining,
        }


class InternalRelayError(RelayError):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}
