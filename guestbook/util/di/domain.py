"""Domain layer DI providers."""

from dishka import Scope, provide

from guestbook.config import CommentSettings
from guestbook.domain.repository import CommentStore, SessionProvider
from guestbook.domain.service import (
    AccessGate,
    CommentBinder,
    CommentThread,
    FlatStoreAdapter,
    MutationEngine,
    Notifier,
)
from guestbook.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Services are APP-scoped: the thread state is shared by every request and
    the mutation engine is its only writer.
    """

    scope = Scope.APP

    @provide
    def get_comment_thread(self, settings: CommentSettings) -> CommentThread:
        """Provide the comment thread state."""
        return CommentThread(max_depth=settings.max_depth)

    @provide
    def get_notifier(self) -> Notifier:
        return Notifier()

    @provide
    def get_access_gate(self, session_provider: SessionProvider) -> AccessGate:
        """Provide delete access gate."""
        return AccessGate(session_provider=session_provider)

    @provide
    def get_store_adapter(
        self, comment_store: CommentStore, settings: CommentSettings
    ) -> FlatStoreAdapter:
        """Provide flat store adapter."""
        return FlatStoreAdapter(comment_store=comment_store, fetch_limit=settings.fetch_limit)

    @provide
    def get_mutation_engine(
        self,
        thread: CommentThread,
        comment_store: CommentStore,
        access_gate: AccessGate,
        notifier: Notifier,
        settings: CommentSettings,
    ) -> MutationEngine:
        """Provide comment mutation engine."""
        return MutationEngine(
            thread=thread,
            comment_store=comment_store,
            access_gate=access_gate,
            notifier=notifier,
            settings=settings,
        )

    @provide
    def get_binder(self, engine: MutationEngine) -> CommentBinder:
        return CommentBinder(engine=engine)
