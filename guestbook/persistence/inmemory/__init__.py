"""In-memory remote store implementations for testing."""

from .comment_store import InMemoryCommentStore
from .session import InMemorySessionProvider

__all__ = [
    "InMemoryCommentStore",
    "InMemorySessionProvider",
]
