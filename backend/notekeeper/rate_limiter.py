"""Rate limiter configuration.

Auth endpoints are limited per client IP. Note endpoints are limited per
signed-in user, keyed off the auth context the bearer dependency stores on
the request before the limit is checked.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from notekeeper.config import settings
from notekeeper.schemas.common import error_body

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Too many requests, please try again later"

# Rate limiter instance - shared across modules
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def user_rate_limit_key(request: Request) -> str:
    """Key by user id when authenticated, by IP otherwise."""
    context = getattr(request.state, "auth_context", None)
    if context is not None:
        return f"user:{context.user_id}"
    return get_remote_address(request)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the standard envelope, with the window length as the retry hint."""
    retry_after = exc.limit.limit.get_expiry()
    message = exc.limit.error_message if isinstance(exc.limit.error_message, str) else None
    logger.warning(f"Rate limit {exc.limit.limit} exceeded on {request.url.path}")
    return JSONResponse(
        status_code=429,
        content=error_body(message or DEFAULT_MESSAGE, details={"retryAfter": retry_after}),
        headers={"Retry-After": str(retry_after)},
    )
