"""SQLAlchemy declarative base for the application models."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Import models so that Alembic discovers the tables via Base.metadata.
# The imports are intentionally placed at the end of the module to avoid
# circular import issues when the individual model modules import ``Base``.
from .conversation_members import conversation_members  # noqa: F401,E402
from .conversations import Conversation  # noqa: F401,E402
from .messages import Message, check_membership  # noqa: F401,E402
from .user_holders import UserHolder  # noqa: F401,E402


__all__ = [
    "Base",
    "Conversation",
    "Message",
    "UserHolder",
    "check_membership",
    "conversation_members",
]
