from __future__ import annotations

import logging

import pytest
from sqlalchemy import func, select

from backend.app.clients.accounts import Account
from backend.app.core.errors import ConflictError, NotFoundError
from backend.app.models import UserHolder
from backend.app.services import user_holders


def _count(session) -> int:
    return session.execute(select(func.count(UserHolder.id))).scalar_one()


def test_find_or_create_inserts_once(session_factory) -> None:
    account = Account(id=42, login="carol", email="carol@example.com")

    with session_factory() as session:
        first = user_holders.find_or_create_by_account(session, account)
        second = user_holders.find_or_create_by_account(session, account)
        session.commit()

        assert first.id is not None
        assert first is second
        assert first.login == "carol"
        assert _count(session) == 1


def test_find_or_create_returns_existing_row(session_factory) -> None:
    with session_factory() as session:
        existing = UserHolder(account_id=7, login="dave")
        session.add(existing)
        session.commit()
        existing_id = existing.id

    with session_factory() as session:
        holder = user_holders.find_or_create_by_account(session, Account(id=7, login="dave"))
        assert holder.id == existing_id
        assert _count(session) == 1


def test_find_or_create_converges_when_another_caller_inserts_first(
    session_factory, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    account = Account(id=77, login="grace", email="grace@example.com")
    lookup = user_holders._by_account_id
    winner_ids: list[int] = []

    def racing_lookup(session, account_id):
        if not winner_ids:
            # A concurrent request commits the row after our first miss.
            with session_factory() as other:
                winner = UserHolder(account_id=account_id, login="grace")
                other.add(winner)
                other.commit()
                winner_ids.append(winner.id)
            return None
        return lookup(session, account_id)

    monkeypatch.setattr(user_holders, "_by_account_id", racing_lookup)

    with caplog.at_level(logging.INFO, logger=user_holders.__name__):
        with session_factory() as session:
            holder = user_holders.find_or_create_by_account(session, account)
            session.commit()

            assert holder.id == winner_ids[0]
            assert _count(session) == 1

    assert "inserted concurrently" in caplog.text
    assert "Created user holder" not in caplog.text


def test_find_or_create_logs_creation(session_factory, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger=user_holders.__name__):
        with session_factory() as session:
            user_holders.find_or_create_by_account(session, Account(id=78, login="heidi"))

    assert "Created user holder" in caplog.text


def test_create_rejects_preassigned_id(session_factory) -> None:
    with session_factory() as session:
        with pytest.raises(ConflictError):
            user_holders.create_user_holder(session, UserHolder(id=9, account_id=9))


def test_create_rejects_duplicate_account(session_factory) -> None:
    with session_factory() as session:
        user_holders.create_user_holder(session, UserHolder(account_id=5, login="erin"))
        with pytest.raises(ConflictError) as excinfo:
            user_holders.create_user_holder(session, UserHolder(account_id=5, login="erin2"))
        assert excinfo.value.error_key == "accountexists"


def test_update_without_id_creates(session_factory) -> None:
    with session_factory() as session:
        holder, created = user_holders.update_user_holder(session, UserHolder(account_id=11, login="frank"))
        assert created is True
        assert holder.id is not None


def test_update_unknown_id_is_not_found(session_factory) -> None:
    with session_factory() as session:
        with pytest.raises(NotFoundError):
            user_holders.update_user_holder(session, UserHolder(id=999, account_id=1))
