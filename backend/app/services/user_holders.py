"""User holder persistence: find-or-create from accounts and plain CRUD."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..clients.accounts import Account
from ..core.errors import ConflictError, NotFoundError
from ..models import Message, UserHolder

logger = logging.getLogger(__name__)

ENTITY_NAME = "userHolder"

_UPSERT_DIALECTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _by_account_id(session: Session, account_id: int) -> UserHolder | None:
    stmt = select(UserHolder).where(UserHolder.account_id == account_id)
    return session.execute(stmt).scalar_one_or_none()


def find_or_create_by_account(session: Session, account: Account) -> UserHolder:
    """Return the user holder for ``account``, inserting it on first contact.

    Concurrent first-time callers race on the unique ``account_id``; the
    losing insert is a no-op and both callers read the same row.
    """

    existing = _by_account_id(session, account.id)
    if existing is not None:
        return existing

    dialect = session.get_bind().dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"find-or-create is not supported on the {dialect} dialect")
    stmt = (
        insert(UserHolder)
        .values(account_id=account.id, login=account.login, email=account.email)
        .on_conflict_do_nothing(index_elements=[UserHolder.account_id])
    )
    inserted = session.execute(stmt).rowcount

    holder = _by_account_id(session, account.id)
    if holder is None:  # pragma: no cover - the row was just written
        raise NotFoundError(ENTITY_NAME, "notfound", "user holder could not be created")
    if inserted:
        logger.info("Created user holder %s for account %s (%s)", holder.id, account.id, account.login)
    else:
        logger.info("User holder for account %s was inserted concurrently", account.id)
    return holder


def get_user_holder(session: Session, user_holder_id: int, *, eager: bool = False) -> UserHolder:
    """Return the user holder or raise :class:`NotFoundError`."""

    if eager:
        stmt = (
            select(UserHolder)
            .options(selectinload(UserHolder.conversations))
            .where(UserHolder.id == user_holder_id)
        )
        holder = session.execute(stmt).scalar_one_or_none()
    else:
        holder = session.get(UserHolder, user_holder_id)
    if holder is None:
        raise NotFoundError(ENTITY_NAME, "nouserholder", "user holder not found")
    return holder


def list_user_holders(session: Session) -> Sequence[UserHolder]:
    stmt = select(UserHolder).options(selectinload(UserHolder.conversations)).order_by(UserHolder.id)
    return session.execute(stmt).scalars().all()


def _flush_unique_account(session: Session) -> None:
    try:
        session.flush()
    except IntegrityError as exc:
        raise ConflictError(
            ENTITY_NAME, "accountexists", "A userHolder for this account already exists"
        ) from exc


def create_user_holder(session: Session, holder: UserHolder) -> UserHolder:
    if holder.id is not None:
        raise ConflictError(ENTITY_NAME, "idexists", "A new userHolder cannot already have an ID")
    session.add(holder)
    _flush_unique_account(session)
    return holder


def update_user_holder(session: Session, holder: UserHolder) -> tuple[UserHolder, bool]:
    """Replace a user holder; returns ``(holder, created)``."""

    if holder.id is None:
        return create_user_holder(session, holder), True
    existing = get_user_holder(session, holder.id)
    existing.account_id = holder.account_id
    existing.login = holder.login
    existing.email = holder.email
    _flush_unique_account(session)
    return existing, False


def delete_user_holder(session: Session, user_holder_id: int) -> None:
    """Delete a user holder that no longer authors any message."""

    holder = get_user_holder(session, user_holder_id)
    authored = session.execute(
        select(func.count(Message.id)).where(Message.user_id == user_holder_id)
    ).scalar_one()
    if authored:
        raise ConflictError(
            ENTITY_NAME, "hasmessages", "A userHolder that authored messages cannot be deleted"
        )
    session.delete(holder)
    session.flush()
