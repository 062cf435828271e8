"""Shared plumbing for the Supabase REST and auth endpoints."""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

import httpx

from guestbook.adapter.error import ProviderError
from guestbook.config import SupabaseSettings

# Access token of the user behind the current request, if any.
# Set per request by the HTTP layer; each asyncio task sees its own value.
current_access_token: ContextVar[Optional[str]] = ContextVar(
    "supabase_access_token", default=None
)


@contextmanager
def use_access_token(token: str | None) -> Iterator[None]:
    """Make ``token`` the access token for calls inside the block."""
    reset = current_access_token.set(token)
    try:
        yield
    finally:
        current_access_token.reset(reset)


class SupabaseEndpoint:
    """Base class for Supabase clients.

    Builds URLs and headers; the access token of the current request is
    forwarded when present so row level security sees the real user.
    """

    def __init__(self, settings: SupabaseSettings) -> None:
        """Initialize endpoint.

        Args:
            settings: Supabase project URL, key and table names
        """
        self.settings = settings
        self.base_url = settings.url.rstrip("/")

    def rest_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def auth_url(self, path: str) -> str:
        return f"{self.base_url}/auth/v1/{path.lstrip('/')}"

    def headers(self, token: str | None = None, *, representation: bool = False) -> dict[str, str]:
        """Request headers.

        Args:
            token: User access token; the anon key is used without one
            representation: Ask PostgREST to return the affected rows
        """
        bearer = token or current_access_token.get() or self.settings.anon_key
        headers = {
            "apikey": self.settings.anon_key,
            "Authorization": f"Bearer {bearer}",
            "Accept": "application/json",
        }
        if representation:
            headers["Prefer"] = "return=representation"
        return headers

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.timeout)

    @staticmethod
    def read_json(response: httpx.Response) -> object:
        """Decode a response body.

        Raises:
            ProviderError: If the status is not 2xx or the body is not JSON
        """
        if response.status_code >= 400:
            raise ProviderError(
                f"Supabase returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"Supabase returned invalid JSON: {e}") from e
