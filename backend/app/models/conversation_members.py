"""Association table between conversations and their member users."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Table, func

from . import Base

conversation_members = Table(
    "conversation_members",
    Base.metadata,
    Column(
        "conversation_id",
        Integer,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "user_holder_id",
        Integer,
        ForeignKey("user_holders.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
    Column("joined_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)
