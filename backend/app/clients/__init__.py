"""Clients for collaborating services."""

from .accounts import Account, AccountClient, get_account_client

__all__ = ["Account", "AccountClient", "get_account_client"]
