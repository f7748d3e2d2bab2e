"""Conversation lookup and membership management."""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..core.errors import ConflictError, NotFoundError
from ..models import Conversation, UserHolder

logger = logging.getLogger(__name__)

ENTITY_NAME = "conversation"


def find_conversation(session: Session, conversation_id: int) -> Conversation | None:
    return session.get(Conversation, conversation_id)


def get_conversation(session: Session, conversation_id: int, *, entity_name: str = ENTITY_NAME) -> Conversation:
    """Return the conversation or raise :class:`NotFoundError`.

    ``entity_name`` lets callers report the failure against their own entity,
    e.g. a message request pointing at a missing conversation.
    """

    conversation = find_conversation(session, conversation_id)
    if conversation is None:
        raise NotFoundError(entity_name, "noconversation", "conversation not found")
    return conversation


def list_conversations(session: Session) -> Sequence[Conversation]:
    stmt = select(Conversation).options(selectinload(Conversation.members)).order_by(Conversation.id)
    return session.execute(stmt).scalars().all()


def _load_members(session: Session, member_ids: Iterable[int]) -> list[UserHolder]:
    wanted = sorted(set(member_ids))
    if not wanted:
        return []
    stmt = select(UserHolder).where(UserHolder.id.in_(wanted))
    found = session.execute(stmt).scalars().all()
    missing = set(wanted) - {holder.id for holder in found}
    if missing:
        raise NotFoundError(
            "userHolder", "nouserholder", f"user holders not found: {sorted(missing)}"
        )
    return list(found)


def create_conversation(
    session: Session,
    *,
    title: str | None,
    member_ids: Iterable[int] = (),
    conversation_id: int | None = None,
) -> Conversation:
    if conversation_id is not None:
        raise ConflictError(ENTITY_NAME, "idexists", "A new conversation cannot already have an ID")
    conversation = Conversation(title=title, members=_load_members(session, member_ids))
    session.add(conversation)
    session.flush()
    logger.info("Created conversation %s with members %s", conversation.id, sorted(conversation.member_ids))
    return conversation


def add_member(session: Session, conversation_id: int, user_holder_id: int) -> Conversation:
    conversation = get_conversation(session, conversation_id)
    if not conversation.contains(user_holder_id):
        conversation.members.extend(_load_members(session, [user_holder_id]))
        session.flush()
    return conversation


def remove_member(session: Session, conversation_id: int, user_holder_id: int) -> Conversation:
    conversation = get_conversation(session, conversation_id)
    if not conversation.contains(user_holder_id):
        raise NotFoundError("userHolder", "notmember", "user holder is not a member of the conversation")
    conversation.members = [member for member in conversation.members if member.id != user_holder_id]
    session.flush()
    return conversation
