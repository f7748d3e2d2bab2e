"""Domain errors surfaced to API callers."""
from __future__ import annotations

import logging

from fastapi import status
from starlette.requests import Request
from starlette.responses import JSONResponse

from .alerts import failure_alert

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors that map onto a 4xx/5xx response with an alert."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, entity_name: str, error_key: str, message: str) -> None:
        super().__init__(message)
        self.entity_name = entity_name
        self.error_key = error_key
        self.message = message


class ConflictError(ServiceError):
    """Raised when a client supplies an identifier where none is allowed."""

    status_code = status.HTTP_409_CONFLICT


class NotFoundError(ServiceError):
    """Raised when a referenced conversation or entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(ServiceError):
    """Raised when an entity violates an invariant at flush time."""

    status_code = status.HTTP_400_BAD_REQUEST


class AccountServiceError(ServiceError):
    """Raised when the external account service cannot answer."""

    status_code = status.HTTP_502_BAD_GATEWAY


def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a :class:`ServiceError` as JSON plus failure alert headers."""

    logger.info(
        "Request %s %s failed: entity=%s key=%s message=%s",
        request.method,
        request.url.path,
        exc.entity_name,
        exc.error_key,
        exc.message,
    )
    return JSONResponse(
        {"detail": exc.message, "error_key": exc.error_key, "entity": exc.entity_name},
        status_code=exc.status_code,
        headers=failure_alert(exc.entity_name, exc.error_key, exc.message),
    )
