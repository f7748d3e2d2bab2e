"""Request handling logic shared by the API routers."""

from . import conversations, messages, user_holders

__all__ = ["conversations", "messages", "user_holders"]
