from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy import func, select

from backend.app.core.config import settings
from backend.app.models import Message, UserHolder

ALERT = f"X-{settings.APP_NAME}-alert"
ERROR = f"X-{settings.APP_NAME}-error"
PARAMS = f"X-{settings.APP_NAME}-params"


def _messages_url(conversation_id: int) -> str:
    return f"/api/conversations/{conversation_id}/messages"


def _count(session_factory, model) -> int:
    with session_factory() as session:
        return session.execute(select(func.count(model.id))).scalar_one()


def test_member_creates_message(login_as, seed) -> None:
    client = login_as("alice")

    response = client.post(_messages_url(seed.conversation_id), json={"message_text": "hi"})

    assert response.status_code == 201
    body = response.json()
    assert body["id"] is not None
    assert body["message_text"] == "hi"
    assert body["conversation_id"] == seed.conversation_id
    assert body["user"] == {"id": seed.alice_id, "login": "alice"}
    assert body["created_by"] == "alice"
    assert response.headers["Location"] == f"/api/conversations/{seed.conversation_id}/messages/{body['id']}"
    assert response.headers[ALERT] == f"A new message is created with identifier {body['id']}"
    assert response.headers[PARAMS] == str(body["id"])


def test_create_with_id_conflicts(login_as, seed, fake_accounts) -> None:
    client = login_as("alice")

    response = client.post(_messages_url(seed.conversation_id), json={"id": 12, "message_text": "hi"})

    assert response.status_code == 409
    assert response.json()["error_key"] == "idexists"
    assert response.headers[ERROR] == "A new message cannot already have an ID"
    assert response.headers[PARAMS] == "message"
    assert fake_accounts.calls == []


def test_create_with_id_conflicts_before_conversation_lookup(login_as, seed) -> None:
    client = login_as("bob")

    response = client.post(_messages_url(9999), json={"id": 1, "message_text": "hi"})

    assert response.status_code == 409
    assert response.json()["error_key"] == "idexists"


def test_create_in_missing_conversation_persists_nothing(login_as, seed, session_factory, fake_accounts) -> None:
    client = login_as("bob")

    response = client.post(_messages_url(9999), json={"message_text": "hi"})

    assert response.status_code == 404
    assert response.json()["error_key"] == "noconversation"
    assert fake_accounts.calls == []
    assert _count(session_factory, UserHolder) == 1
    assert _count(session_factory, Message) == 0


def test_non_member_is_rejected_and_rolled_back(login_as, seed, session_factory) -> None:
    client = login_as("bob")

    response = client.post(_messages_url(seed.conversation_id), json={"message_text": "hi"})

    assert response.status_code == 400
    assert response.json()["error_key"] == "notmember"
    assert response.headers[ERROR] == "user must be part of conversations members"
    # Bob's user holder was created in the same transaction and rolled back with it.
    assert _count(session_factory, UserHolder) == 1
    assert _count(session_factory, Message) == 0


def test_new_member_can_post_once_added(app, login_as, seed, session_factory) -> None:
    client = login_as("bob")
    assert client.post(_messages_url(seed.conversation_id), json={"message_text": "hello?"}).status_code == 400

    created = app.post("/api/user-holders", json={"account_id": 2, "login": "bob"})
    assert created.status_code == 201
    bob_id = created.json()["id"]
    assert app.put(f"/api/conversations/{seed.conversation_id}/members/{bob_id}").status_code == 200

    response = client.post(_messages_url(seed.conversation_id), json={"message_text": "hello!"})

    assert response.status_code == 201
    assert response.json()["user"]["id"] == bob_id
    assert _count(session_factory, UserHolder) == 2


def test_unknown_caller_is_not_a_member(login_as, seed, session_factory, fake_accounts) -> None:
    client = login_as("mallory")

    response = client.post(_messages_url(seed.conversation_id), json={"message_text": "hi"})

    # The failed lookup is not an error, but the message is left without a member author.
    assert fake_accounts.calls == ["mallory"]
    assert response.status_code == 400
    assert response.json()["error_key"] == "notmember"
    assert _count(session_factory, UserHolder) == 1
    assert _count(session_factory, Message) == 0


def test_anonymous_create_without_author_is_rejected(app: Any, seed, session_factory) -> None:
    response = app.post(_messages_url(seed.conversation_id), json={"message_text": "hi"})

    assert response.status_code == 400
    assert response.json()["error_key"] == "notmember"
    assert response.headers[ERROR] == "user must be part of conversations members"
    assert _count(session_factory, Message) == 0


def test_anonymous_create_uses_requested_author(app: Any, seed) -> None:
    response = app.post(
        _messages_url(seed.conversation_id),
        json={"message_text": "hi", "user_id": seed.alice_id},
    )

    assert response.status_code == 201
    assert response.json()["user"]["id"] == seed.alice_id
    assert response.json()["created_by"] == "system"


@pytest.mark.parametrize("payload", [{"message_text": ""}, {"message_text": "   "}, {}])
def test_missing_text_is_rejected(login_as, seed, session_factory, payload) -> None:
    client = login_as("alice")

    response = client.post(_messages_url(seed.conversation_id), json=payload)

    assert response.status_code == 400
    assert response.json()["error_key"] == "textrequired"
    assert response.headers[ERROR] == "message text must not be empty"
    assert response.headers[PARAMS] == "message"
    assert _count(session_factory, Message) == 0


def test_list_messages(login_as, seed) -> None:
    client = login_as("alice")
    for text in ("one", "two"):
        assert client.post(_messages_url(seed.conversation_id), json={"message_text": text}).status_code == 201

    response = client.get(_messages_url(seed.conversation_id))

    assert response.status_code == 200
    summaries = response.json()
    assert [item["message_text"] for item in summaries] == ["one", "two"]
    assert {item["login"] for item in summaries} == {"alice"}
    assert set(summaries[0]) == {"id", "message_text", "user_id", "login", "created_at"}


def test_list_of_missing_conversation_is_empty(app: Any, seed) -> None:
    response = app.get(_messages_url(424242))

    assert response.status_code == 200
    assert response.json() == []


def test_get_message(login_as, seed) -> None:
    client = login_as("alice")
    message_id = client.post(_messages_url(seed.conversation_id), json={"message_text": "hi"}).json()["id"]

    found = client.get(f"{_messages_url(seed.conversation_id)}/{message_id}")
    missing = client.get(f"{_messages_url(seed.conversation_id)}/{message_id + 100}")

    assert found.status_code == 200
    assert found.json()["message_text"] == "hi"
    assert missing.status_code == 404


def test_update_without_id_behaves_like_create(login_as, seed) -> None:
    client = login_as("alice")

    response = client.put(_messages_url(seed.conversation_id), json={"message_text": "via put"})

    assert response.status_code == 201
    assert response.json()["user"]["id"] == seed.alice_id
    assert response.headers[ALERT].startswith("A new message is created")


def test_update_replaces_text(login_as, seed) -> None:
    client = login_as("alice")
    created = client.post(_messages_url(seed.conversation_id), json={"message_text": "draft"}).json()

    response = client.put(
        _messages_url(seed.conversation_id),
        json={"id": created["id"], "message_text": "final", "user_id": seed.alice_id},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == created["id"]
    assert body["message_text"] == "final"
    assert body["conversation_id"] == seed.conversation_id
    assert body["last_modified_by"] == "alice"
    assert response.headers[ALERT] == f"A message is updated with identifier {created['id']}"


def test_update_is_a_full_replacement(login_as, seed) -> None:
    client = login_as("alice")
    created = client.post(_messages_url(seed.conversation_id), json={"message_text": "draft"}).json()

    # Omitting the author clears it, which the membership rule rejects.
    response = client.put(
        _messages_url(seed.conversation_id),
        json={"id": created["id"], "message_text": "final"},
    )

    assert response.status_code == 400
    assert response.json()["error_key"] == "notmember"
    assert client.get(f"{_messages_url(seed.conversation_id)}/{created['id']}").json()["message_text"] == "draft"


def test_update_requires_conversation(login_as, seed) -> None:
    client = login_as("alice")

    response = client.put(_messages_url(9999), json={"id": 1, "message_text": "x"})

    assert response.status_code == 404
    assert response.json()["error_key"] == "noconversation"


def test_update_of_unknown_message_is_not_found(login_as, seed) -> None:
    client = login_as("alice")

    response = client.put(
        _messages_url(seed.conversation_id),
        json={"id": 777, "message_text": "x", "user_id": seed.alice_id},
    )

    assert response.status_code == 404
    assert response.json()["error_key"] == "notfound"


def test_delete_message(login_as, seed, session_factory) -> None:
    client = login_as("alice")
    message_id = client.post(_messages_url(seed.conversation_id), json={"message_text": "bye"}).json()["id"]

    response = client.delete(f"{_messages_url(seed.conversation_id)}/{message_id}")

    assert response.status_code == 200
    assert response.headers[ALERT] == f"A message is deleted with identifier {message_id}"
    assert _count(session_factory, Message) == 0


def test_delete_does_not_check_message_conversation(login_as, seed, session_factory) -> None:
    client = login_as("alice")
    message_id = client.post(_messages_url(seed.conversation_id), json={"message_text": "bye"}).json()["id"]

    # The message lives in the first conversation; deleting through another one still works.
    response = client.delete(f"{_messages_url(seed.other_conversation_id)}/{message_id}")

    assert response.status_code == 200
    assert _count(session_factory, Message) == 0


def test_delete_requires_conversation(login_as, seed) -> None:
    client = login_as("alice")
    message_id = client.post(_messages_url(seed.conversation_id), json={"message_text": "bye"}).json()["id"]

    response = client.delete(f"{_messages_url(9999)}/{message_id}")

    assert response.status_code == 404
    assert response.json()["error_key"] == "noconversation"
