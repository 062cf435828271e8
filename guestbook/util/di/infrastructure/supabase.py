"""Supabase infrastructure providers."""

from dishka import Scope, provide

from guestbook.adapter.supabase import SupabaseCommentStore, SupabaseSessionProvider
from guestbook.config import Settings, SupabaseSettings
from guestbook.domain.repository import CommentStore, SessionProvider
from guestbook.util.di.base import ProviderBase
from guestbook.util.error import ConfigurationError

PLACEHOLDER_KEY = "CHANGE_ME_IN_PRODUCTION"


class SupabaseProvider(ProviderBase):
    """Supabase component base."""

    __mock_component__ = "supabase"


class ProdSupabaseProvider(SupabaseProvider):
    """Production provider talking to the Supabase REST and auth APIs."""

    __is_mock__ = False

    scope = Scope.APP

    @provide
    def get_comment_store(
        self, settings: Settings, supabase: SupabaseSettings
    ) -> CommentStore:
        """Provide the Supabase comment store.

        Raises:
            ConfigurationError: If production runs with the placeholder key
        """
        if settings.environment == "production" and supabase.anon_key == PLACEHOLDER_KEY:
            raise ConfigurationError("SUPABASE__ANON_KEY", "must be configured in production")
        return SupabaseCommentStore(supabase)

    @provide
    def get_session_provider(self, supabase: SupabaseSettings) -> SessionProvider:
        """Provide the Supabase auth session provider."""
        return SupabaseSessionProvider(supabase)
