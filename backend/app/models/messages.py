"""Conversation message persistence model and its membership rule."""
from __future__ import annotations

from typing import Any

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, event, func, inspect
from sqlalchemy.orm import Session, relationship

from ..core.errors import ValidationError
from . import Base
from .conversations import Conversation
from .user_holders import UserHolder

ENTITY_NAME = "message"
MEMBERSHIP_ERROR = "user must be part of conversations members"


class Message(Base):
    """Individual message belonging to a conversation."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message_text = Column(Text, nullable=False)
    conversation_id = Column(
        Integer,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    user_id = Column(
        Integer,
        ForeignKey("user_holders.id"),
        nullable=True,
        index=True,
    )
    created_by = Column(String(length=100), nullable=False, default="system")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_modified_by = Column(String(length=100), nullable=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    conversation = relationship("Conversation", back_populates="messages")
    user = relationship("UserHolder", back_populates="messages")

    def check_user_is_member_of_conversation(self) -> bool:
        """Return whether the author belongs to the conversation's member set.

        A message without a conversation passes. A message with a conversation
        passes only when its user is set and is one of the members.
        """

        conversation = self.conversation
        if conversation is None:
            return True
        user = self.user
        if user is None:
            return False
        if user.id is None:
            # Not flushed yet, so compare by object.
            return any(member is user for member in conversation.members)
        return conversation.contains(user.id)

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if other is None or type(other) is not type(self):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Message(id={self.id!s}, conversation_id={self.conversation_id!s}, message_text={self.message_text!r})"


def check_membership(message: Message) -> bool:
    """Membership invariant for ``message``; see :meth:`Message.check_user_is_member_of_conversation`."""

    return message.check_user_is_member_of_conversation()


def _hydrate_references(session: Session, message: Message) -> None:
    # Only foreign keys that were assigned without their relationship.
    loaded = inspect(message).dict
    if "conversation" not in loaded and message.conversation_id is not None:
        message.conversation = session.get(Conversation, message.conversation_id)
    if "user" not in loaded and message.user_id is not None:
        message.user = session.get(UserHolder, message.user_id)


def validate_message(session: Session, message: Message) -> None:
    """Raise :class:`ValidationError` if ``message`` must not be persisted."""

    if message.message_text is None or not str(message.message_text).strip():
        raise ValidationError(ENTITY_NAME, "textrequired", "message text must not be empty")
    _hydrate_references(session, message)
    if not check_membership(message):
        raise ValidationError(ENTITY_NAME, "notmember", MEMBERSHIP_ERROR)


@event.listens_for(Session, "before_flush")
def _validate_pending_messages(session: Session, flush_context: Any, instances: Any) -> None:
    for obj in [*session.new, *session.dirty]:
        if isinstance(obj, Message):
            validate_message(session, obj)
