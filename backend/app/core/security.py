"""Caller identity helpers backed by the signed session cookie."""
from __future__ import annotations

from starlette.requests import Request

SESSION_LOGIN_KEY = "login"


def get_caller_login(request: Request) -> str | None:
    """Return the authenticated caller's login, or ``None`` for anonymous requests.

    The login is written into the session by the gateway that authenticated
    the user; this service only reads it.
    """

    try:
        raw_login = request.session.get(SESSION_LOGIN_KEY)
    except AssertionError:  # SessionMiddleware not installed
        return None
    if not raw_login:
        return None
    login = str(raw_login).strip()
    return login or None
