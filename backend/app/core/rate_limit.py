"""
Rate limiting for the unauthenticated auth endpoints.

Register and login are limited per client address with slowapi. Routes opt
in with `@limiter.limit(settings.auth_rate_limit)` and must take a
`request: Request` argument.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from backend.app.core.config import settings
from backend.app.core.exceptions import error_response

logger = logging.getLogger("tours_booking.auth")

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        "Auth rate limit exceeded",
        extra={
            "client_ip": get_remote_address(request),
            "path": request.url.path,
            "limit": str(exc.detail),
        }
    )
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "ERR_RATE_LIMIT",
        "Too many attempts. Please try again later.",
        {"limit": str(exc.detail)},
    )
