"""Conversation persistence models."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from . import Base


class Conversation(Base):
    """A set of member users and the messages exchanged among them."""

    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(length=255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    members = relationship(
        "UserHolder",
        secondary="conversation_members",
        back_populates="conversations",
        order_by="UserHolder.id",
    )
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.id",
    )

    @property
    def member_ids(self) -> frozenset[int]:
        """Identifiers of the current members."""

        return frozenset(member.id for member in self.members if member.id is not None)

    def contains(self, user_id: int | None) -> bool:
        """Return whether ``user_id`` belongs to the member set."""

        if user_id is None:
            return False
        return user_id in self.member_ids

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Conversation(id={self.id!s}, title={self.title!r})"
