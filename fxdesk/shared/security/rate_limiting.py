"""
Rate limiting configuration and setup.

Uses slowapi. Signed-in callers are limited per user id, anonymous
callers per client address. Write endpoints carry the heavier limit.
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from fxdesk.core.config import settings


def rate_limit_key(request: Request) -> str:
    """Bucket key: the forwarded user id when present, else the client address."""
    user_id = request.headers.get(settings.auth_user_header, "").strip()
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=rate_limit_key, default_limits=[settings.rate_limit_default])


async def rate_limit_exceeded_handler(
    _request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Return 429 with the limit that was hit, e.g. ``10 per 1 minute``."""
    return JSONResponse(
        status_code=429,
        content={"error": "Rate limit exceeded", "detail": str(exc.detail)},
    )
