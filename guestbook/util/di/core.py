"""Configuration providers."""

from dishka import Scope, provide

from guestbook.config import CommentSettings, Settings, SupabaseSettings
from guestbook.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Settings and their nested sections.

    Settings are read once per container from the environment and ``.env``;
    services depend on the section they use rather than on the whole object.
    """

    scope = Scope.APP

    @provide
    def get_settings(self) -> Settings:
        return Settings()

    @provide
    def get_comment_settings(self, settings: Settings) -> CommentSettings:
        """Comment limits, depth policy, paging and cache location."""
        return settings.comments

    @provide
    def get_supabase_settings(self, settings: Settings) -> SupabaseSettings:
        return settings.supabase
