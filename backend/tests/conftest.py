from __future__ import annotations

import base64
import json
import os
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

os.environ.setdefault("DATABASE_URL", "sqlite://")

import itsdangerous
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app.clients.accounts import Account, get_account_client
from backend.app.core import db as db_module
from backend.app.core.config import settings
from backend.app.core.rate_limiter import limiter
from backend.app.main import create_app
from backend.app.models import Base, Conversation, UserHolder


class FakeAccountClient:
    """In-memory stand-in for the account service."""

    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self.calls: list[str] = []

    def register(self, account_id: int, login: str) -> Account:
        account = Account(id=account_id, login=login, email=f"{login}@example.com")
        self.accounts[login] = account
        return account

    async def get_account(self, login: str) -> Account | None:
        self.calls.append(login)
        return self.accounts.get(login)


@dataclass
class Seed:
    conversation_id: int
    other_conversation_id: int
    alice_id: int


@pytest.fixture()
def engine() -> Iterator:
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, class_=Session)


def _session_ctx(factory: sessionmaker):
    def _get_session() -> Iterator[Session]:
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return _get_session


@pytest.fixture()
def fake_accounts() -> FakeAccountClient:
    accounts = FakeAccountClient()
    accounts.register(1, "alice")
    accounts.register(2, "bob")
    return accounts


@pytest.fixture()
def app(
    monkeypatch: pytest.MonkeyPatch,
    session_factory: sessionmaker,
    fake_accounts: FakeAccountClient,
) -> TestClient:
    monkeypatch.setattr(db_module, "SessionLocal", session_factory)
    limiter.reset()

    app = create_app()
    app.dependency_overrides[db_module.get_session] = _session_ctx(session_factory)
    app.dependency_overrides[get_account_client] = lambda: fake_accounts
    return TestClient(app)


def _session_cookie(data: dict[str, str]) -> str:
    signer = itsdangerous.TimestampSigner(settings.SESSION_SECRET)
    payload = base64.b64encode(json.dumps(data).encode("utf-8"))
    return signer.sign(payload).decode("utf-8")


@pytest.fixture()
def login_as(app: TestClient) -> Callable[[str], TestClient]:
    def _login(login: str) -> TestClient:
        app.cookies.set(settings.SESSION_COOKIE_NAME, _session_cookie({"login": login}))
        return app

    return _login


@pytest.fixture()
def seed(session_factory: sessionmaker) -> Seed:
    """Alice (account 1) is the only member of one conversation; a second one is empty."""

    with session_factory() as session:
        alice = UserHolder(account_id=1, login="alice", email="alice@example.com")
        conversation = Conversation(title="General", members=[alice])
        other = Conversation(title="Elsewhere")
        session.add_all([alice, conversation, other])
        session.commit()
        return Seed(conversation_id=conversation.id, other_conversation_id=other.id, alice_id=alice.id)
