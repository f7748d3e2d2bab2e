"""Shared SlowAPI rate limiter configuration."""
from __future__ import annotations

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from .alerts import failure_alert
from .security import get_caller_login

logger = logging.getLogger(__name__)


def _caller_or_ip_key(request: Request) -> str:
    """Return the rate limit bucket key for the current request."""

    # Callers behind the same gateway share an address, so prefer the login.
    login = get_caller_login(request)
    if login:
        return f"login:{login}"
    return get_remote_address(request)


limiter = Limiter(key_func=_caller_or_ip_key)


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return a JSON response when a rate limit is exceeded."""

    logger.warning("Rate limit exceeded for path=%s key=%s", request.url.path, exc.detail)
    return JSONResponse(
        {"detail": "Rate limit exceeded", "error_key": "ratelimit", "entity": "request"},
        status_code=exc.status_code,
        headers=failure_alert("request", "ratelimit", "Rate limit exceeded"),
    )
