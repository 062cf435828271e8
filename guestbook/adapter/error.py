"""Errors raised inside the remote API adapters.

They never leave the adapter: stores fold them into a failed StoreResponse
and the session provider falls back to an anonymous session.
"""


class AdapterError(Exception):
    """Base error for remote API adapters."""


class ProviderError(AdapterError):
    """Supabase answered with an error status or an unreadable body."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
