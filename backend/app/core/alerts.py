"""Structured alert headers attached to API responses."""
from __future__ import annotations

from .config import settings


def _header(kind: str) -> str:
    return f"X-{settings.APP_NAME}-{kind}"


def create_alert(message: str, param: str) -> dict[str, str]:
    """Return the header pair carrying a success alert."""

    return {_header("alert"): message, _header("params"): param}


def entity_creation_alert(entity_name: str, param: str) -> dict[str, str]:
    return create_alert(f"A new {entity_name} is created with identifier {param}", param)


def entity_update_alert(entity_name: str, param: str) -> dict[str, str]:
    return create_alert(f"A {entity_name} is updated with identifier {param}", param)


def entity_deletion_alert(entity_name: str, param: str) -> dict[str, str]:
    return create_alert(f"A {entity_name} is deleted with identifier {param}", param)


def failure_alert(entity_name: str, error_key: str, default_message: str) -> dict[str, str]:
    """Return the header pair describing a failed request.

    ``error_key`` is not part of the headers; it travels in the JSON body so
    clients can translate it.
    """

    return {_header("error"): default_message, _header("params"): entity_name}
