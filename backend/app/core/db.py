"""Database utilities for SQLAlchemy and Alembic."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from .config import settings


def _create_engine() -> Engine:
    """Create the SQLAlchemy engine using application settings."""

    kwargs: dict[str, Any] = {"pool_pre_ping": True, "future": True, "echo": settings.DATABASE_ECHO}
    if settings.DATABASE_URL.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_engine(settings.DATABASE_URL, **kwargs)


ENGINE: Engine = _create_engine()
SessionLocal = sessionmaker[
    Session
](bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)


def get_session() -> Generator[Session, None, None]:
    """Provide a transactional scope around a single request.

    Everything a handler writes (conversation, user holder, message) commits
    together, or is rolled back together when any step raises.
    """

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Context manager flavour of :func:`get_session` for scripts."""

    yield from get_session()
