"""Message request handling: lookup, author resolution, persistence.

Every write goes through ``session.flush()`` so the store assigns the
identifier and the membership rule registered on the session runs while the
request transaction is still open; a violation aborts the whole request.
"""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..clients.accounts import AccountLookup
from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..core.metrics import record_message_write
from ..models import Message, UserHolder
from ..models.messages import ENTITY_NAME
from .conversations import get_conversation
from .user_holders import find_or_create_by_account, get_user_holder

logger = logging.getLogger(__name__)

SYSTEM_ACCOUNT = "system"


async def _resolve_author(
    session: Session, caller_login: str | None, accounts: AccountLookup
) -> UserHolder | None:
    if not caller_login:
        return None
    logger.info("saving message for user %s", caller_login)
    account = await accounts.get_account(caller_login)
    if account is None:
        return None
    return find_or_create_by_account(session, account)


def _flush(session: Session, operation: str) -> None:
    try:
        session.flush()
    except ValidationError:
        record_message_write(operation, "invalid")
        raise
    record_message_write(operation, "ok")


def _requested_user(session: Session, user_id: int | None) -> UserHolder | None:
    if user_id is None:
        return None
    return get_user_holder(session, user_id)


async def create_message(
    session: Session,
    message: Message,
    conversation_id: int,
    caller_login: str | None,
    accounts: AccountLookup,
) -> Message:
    """Persist a new message in ``conversation_id`` authored by the caller."""

    logger.debug("REST request to save Message : %r", message)
    if message.id is not None:
        record_message_write("create", "conflict")
        raise ConflictError(ENTITY_NAME, "idexists", "A new message cannot already have an ID")
    conversation = get_conversation(session, conversation_id, entity_name=ENTITY_NAME)

    author = await _resolve_author(session, caller_login, accounts)
    user = author if author is not None else _requested_user(session, message.user_id)

    new_message = Message(
        message_text=message.message_text,
        user=user,
        created_by=caller_login or SYSTEM_ACCOUNT,
        last_modified_by=caller_login or SYSTEM_ACCOUNT,
    )
    session.add(conversation)
    new_message.conversation = conversation
    session.add(new_message)
    _flush(session, "create")
    logger.info("Created message %s in conversation %s", new_message.id, conversation.id)
    return new_message


async def update_message(
    session: Session,
    message: Message,
    conversation_id: int,
    caller_login: str | None,
    accounts: AccountLookup,
) -> tuple[Message, bool]:
    """Replace a message's text and author; returns ``(message, created)``.

    A message without an identifier is created instead.
    """

    logger.debug("REST request to update Message : %r", message)
    get_conversation(session, conversation_id, entity_name=ENTITY_NAME)
    if message.id is None:
        return await create_message(session, message, conversation_id, caller_login, accounts), True

    existing = session.get(Message, message.id)
    if existing is None:
        record_message_write("update", "missing")
        raise NotFoundError(ENTITY_NAME, "notfound", "message not found")
    existing.message_text = message.message_text
    existing.user = _requested_user(session, message.user_id)
    existing.last_modified_by = caller_login or SYSTEM_ACCOUNT
    _flush(session, "update")
    return existing, False


def list_messages(session: Session, conversation_id: int) -> Sequence[Message]:
    """Messages of ``conversation_id``; empty when the conversation does not exist."""

    logger.debug("REST request to get all Messages of conversation %s", conversation_id)
    stmt = (
        select(Message)
        .options(selectinload(Message.user))
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.id)
    )
    return session.execute(stmt).scalars().all()


def get_message(session: Session, message_id: int) -> Message:
    logger.debug("REST request to get Message : %s", message_id)
    message = session.get(Message, message_id)
    if message is None:
        raise NotFoundError(ENTITY_NAME, "notfound", "message not found")
    return message


def delete_message(session: Session, message_id: int, conversation_id: int) -> None:
    """Delete ``message_id`` once ``conversation_id`` is known to exist.

    The message is not required to belong to that conversation.
    """

    logger.debug("REST request to delete Message : %s", message_id)
    get_conversation(session, conversation_id, entity_name=ENTITY_NAME)
    message = get_message(session, message_id)
    session.delete(message)
    session.flush()
    record_message_write("delete", "ok")
