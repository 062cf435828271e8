"""User notices and the thread-changed signal."""

from collections import OrderedDict, deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

import logfire

from guestbook.domain.model.common import DomainModel
from guestbook.domain.value import NoticeLevel

# Audience for work not tied to a visitor, such as the startup load
LOCAL_AUDIENCE = "local"

current_audience: ContextVar[str] = ContextVar("current_audience", default=LOCAL_AUDIENCE)


@contextmanager
def use_audience(audience: str) -> Iterator[None]:
    """Send notices raised in this context to one visitor."""
    reset = current_audience.set(audience)
    try:
        yield
    finally:
        current_audience.reset(reset)


class Notice(DomainModel):
    """Transient, dismissable message for the user."""

    level: NoticeLevel
    message: str
    created_at: datetime


class ThreadChanged(DomainModel):
    """Signal emitted after the thread was rebuilt.

    External views (search index, admin panel) listen for it to resync.
    """

    reason: str
    total: int
    version: int


ThreadListener = Callable[[ThreadChanged], None]


class Notifier:
    """Collects notices per visitor and fans out thread-changed signals."""

    def __init__(self, max_notices: int = 50, max_audiences: int = 1000) -> None:
        """Initialize notifier.

        Args:
            max_notices: Oldest notices of a visitor are dropped beyond this many
            max_audiences: Least recently noticed visitors are dropped beyond this many
        """
        self._max_notices = max_notices
        self._max_audiences = max_audiences
        self._notices: OrderedDict[str, deque[Notice]] = OrderedDict()
        self._listeners: list[ThreadListener] = []

    def notify(self, level: NoticeLevel, message: str, audience: str | None = None) -> Notice:
        """Queue a notice for the visitor whose action raised it."""
        audience = audience or current_audience.get()
        notice = Notice(level=level, message=message, created_at=datetime.now(timezone.utc))
        queue = self._notices.pop(audience, None)
        if queue is None:
            queue = deque(maxlen=self._max_notices)
        queue.append(notice)
        self._notices[audience] = queue
        while len(self._notices) > self._max_audiences:
            self._notices.popitem(last=False)
        return notice

    def pending(self, audience: str | None = None) -> list[Notice]:
        return list(self._notices.get(audience or current_audience.get(), ()))

    def drain(self, audience: str | None = None) -> list[Notice]:
        """Return and dismiss the visitor's queued notices."""
        return list(self._notices.pop(audience or current_audience.get(), ()))

    def subscribe(self, listener: ThreadListener) -> Callable[[], None]:
        """Register a thread-changed listener.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: ThreadChanged) -> None:
        """Deliver a thread-changed signal to every listener.

        A failing listener is logged and does not stop the others.
        """
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logfire.error(
                    "Thread listener failed",
                    reason=event.reason,
                    error=str(e),
                    error_type=type(e).__name__,
                )
