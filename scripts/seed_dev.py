"""Seed the development database with two users sharing a conversation."""
from __future__ import annotations

import sys
from contextlib import AbstractContextManager
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.app.clients.accounts import Account  # noqa: E402
from backend.app.core.db import session_scope  # noqa: E402
from backend.app.models import Conversation  # noqa: E402
from backend.app.services.user_holders import find_or_create_by_account  # noqa: E402


def _get_or_create_conversation(session, title: str) -> Conversation:
    conversation = session.query(Conversation).filter(Conversation.title == title).one_or_none()
    if conversation is None:
        conversation = Conversation(title=title)
        session.add(conversation)
        session.flush()
    return conversation


def main(context: AbstractContextManager | None = None) -> None:
    """Entry point for seeding data."""

    session_ctx = context or session_scope()
    with session_ctx as session:
        alice = find_or_create_by_account(session, Account(id=1001, login="alice", email="alice@example.com"))
        bob = find_or_create_by_account(session, Account(id=1002, login="bob", email="bob@example.com"))
        conversation = _get_or_create_conversation(session, "Development")
        for holder in (alice, bob):
            if not conversation.contains(holder.id):
                conversation.members.append(holder)
        session.flush()

        print("Seeded development data:")
        print(f"  User holders: {alice.id} (alice), {bob.id} (bob)")
        print(f"  Conversation ID: {conversation.id}")


if __name__ == "__main__":
    main()
