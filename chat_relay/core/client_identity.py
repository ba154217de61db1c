"""
client_identity.py: Originating address used as the rate-limit key.

Precedence, first non-empty wins:
  1. X-Forwarded-For (first comma-separated entry, trimmed)
  2. X-Real-IP
  3. Transport-level peer address
  4. "unknown"

The value is an opaque key, never parsed or trusted as an IP. Anyone can
send their own X-Forwarded-For and get a fresh quota; that is accepted for
a per-day soft limit behind a proxy.
"""

from collections.abc import Callable, Mapping

from fastapi import Request

UNKNOWN_CLIENT = "unknown"

Extractor = Callable[[Mapping[str, str], str | None], str | None]


def from_forwarded_for(headers: Mapping[str, str], remote_address: str | None) -> str | None:
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return None


def from_real_ip(headers: Mapping[str, str], remote_address: str | None) -> str | None:
    return headers.get("x-real-ip")


def from_remote_address(headers: Mapping[str, str], remote_address: str | None) -> str | None:
    return remote_address


# Tried in order by resolve_client_identity().
IDENTITY_EXTRACTORS: tuple[Extractor, ...] = (
    from_forwarded_for,
    from_real_ip,
    from_remote_address,
)


def resolve_client_identity(
    headers: Mapping[str, str],
    remote_address: str | None,
    extractors: tuple[Extractor, ...] = IDENTITY_EXTRACTORS,
) -> str:
    """
    Return the first non-empty identifier produced by *extractors*.

    *headers* must do case-insensitive lookup with lower-case keys
    (Starlette's Headers does); plain dicts should use lower-case keys.
    """
    for extract in extractors:
        value = extract(headers, remote_address)
        if value:
            return value
    return UNKNOWN_CLIENT


def get_client_identity(request: Request) -> str:
    """FastAPI dependency: identifier for the calling client."""
    remote_address = request.client.host if request.client else None
    return resolve_client_identity(request.headers, remote_address)
