"""API package exports."""
from . import routes_admin, routes_conversations, routes_messages, routes_user_holders

__all__ = [
    "routes_admin",
    "routes_conversations",
    "routes_messages",
    "routes_user_holders",
]
