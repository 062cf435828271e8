"""Application layer DI providers."""

from dishka import Scope, provide

from guestbook.application.usecase.comment import CommentTreeService
from guestbook.config import CommentSettings
from guestbook.domain.service import (
    AccessGate,
    CommentBinder,
    CommentThread,
    FlatStoreAdapter,
    MutationEngine,
    Notifier,
)
from guestbook.persistence.cache import FlatListCache
from guestbook.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application services provider - concrete, no mocks needed."""

    @provide(scope=Scope.APP)
    def get_comment_tree_service(
        self,
        thread: CommentThread,
        adapter: FlatStoreAdapter,
        engine: MutationEngine,
        access_gate: AccessGate,
        notifier: Notifier,
        binder: CommentBinder,
        settings: CommentSettings,
    ) -> CommentTreeService:
        """Provide the comment tree service.

        The local cache is only wired in when a cache path is configured.
        """
        cache = (
            FlatListCache(settings.cache_path, ttl_seconds=settings.cache_ttl_seconds)
            if settings.cache_path is not None
            else None
        )
        return CommentTreeService(
            thread=thread,
            adapter=adapter,
            engine=engine,
            access_gate=access_gate,
            notifier=notifier,
            binder=binder,
            settings=settings,
            cache=cache,
        )
