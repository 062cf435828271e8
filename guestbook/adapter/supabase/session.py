"""Supabase auth session provider."""

import httpx
import logfire

from guestbook.adapter.error import ProviderError
from guestbook.config import SupabaseSettings
from guestbook.domain.repository import SessionProvider
from guestbook.domain.value import Role, Session, UserId

from .client import SupabaseEndpoint, current_access_token


class SupabaseSessionProvider(SupabaseEndpoint, SessionProvider):
    """Resolves the current access token to a session.

    The user comes from GoTrue (``/auth/v1/user``); the admin role is
    membership in the admins table. Any failure yields an anonymous session.
    """

    def __init__(self, settings: SupabaseSettings) -> None:
        super().__init__(settings)
        self.admins_url = self.rest_url(settings.admins_table)

    async def get_session(self) -> Session:
        token = current_access_token.get()
        if not token:
            return Session.anonymous()

        try:
            async with self.client() as client:
                user_response = await client.get(
                    self.auth_url("user"), headers=self.headers(token)
                )
                user = self.read_json(user_response)
                if not isinstance(user, dict) or not user.get("id"):
                    raise ProviderError("Auth API returned no user")

                admin_response = await client.get(
                    self.admins_url,
                    params={"select": "id", "id": f"eq.{user['id']}"},
                    headers=self.headers(token),
                )
                admins = self.read_json(admin_response)
        except (httpx.HTTPError, ProviderError) as e:
            logfire.warn("Session lookup failed", error=str(e))
            return Session.anonymous()

        is_admin = isinstance(admins, list) and len(admins) > 0
        logfire.debug("Session resolved", user_id=user["id"], is_admin=is_admin)
        return Session(
            signed_in=True,
            role=Role.ADMIN if is_admin else Role.USER,
            user_id=UserId(str(user["id"])),
            email=user.get("email"),
        )
