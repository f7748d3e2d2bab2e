"""HTTP client for the external account service."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Protocol
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.config import settings
from ..core.errors import AccountServiceError

logger = logging.getLogger(__name__)


class Account(BaseModel):
    """Account record as returned by the account service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    login: str
    email: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    activated: bool = True


class AccountLookup(Protocol):
    """Anything that can resolve a login to an account."""

    async def get_account(self, login: str) -> Account | None:
        """Return the account for ``login`` or ``None`` if it is unknown."""


class AccountClient:
    """Resolve caller logins against ``GET /api/users/{login}``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def get_account(self, login: str) -> Account | None:
        path = f"/api/users/{quote(login, safe='')}"
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(path)
        except httpx.TransportError as exc:
            logger.warning("Account service %s unreachable: %s", self.base_url, exc)
            raise AccountServiceError("account", "unreachable", "account service unreachable") from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.info("No account found for login %s", login)
            return None
        if response.is_error:
            logger.warning(
                "Account service returned %s for login %s", response.status_code, login
            )
            raise AccountServiceError(
                "account", "lookupfailed", f"account lookup failed with status {response.status_code}"
            )
        try:
            return Account.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Account service sent an unreadable account for login %s: %s", login, exc)
            raise AccountServiceError("account", "badpayload", "account service returned an invalid account") from exc


@lru_cache(maxsize=1)
def get_account_client() -> AccountLookup:
    """Return the configured account client (overridden in tests)."""

    return AccountClient(settings.ACCOUNT_SERVICE_URL, timeout=settings.ACCOUNT_SERVICE_TIMEOUT)
