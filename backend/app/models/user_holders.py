"""Local mirror of accounts held by the external account service."""
from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from . import Base


class UserHolder(Base):
    """User identity persisted on first contact with an external account."""

    __tablename__ = "user_holders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(BigInteger, nullable=False, unique=True, index=True)
    login = Column(String(length=100), nullable=True, index=True)
    email = Column(String(length=255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    conversations = relationship(
        "Conversation",
        secondary="conversation_members",
        back_populates="members",
    )
    messages = relationship("Message", back_populates="user")

    @property
    def conversation_ids(self) -> list[int]:
        """Identifiers of the conversations this user is a member of."""

        return sorted(conversation.id for conversation in self.conversations)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"UserHolder(id={self.id!s}, account_id={self.account_id!s}, login={self.login!r})"
