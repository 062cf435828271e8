"""Repository interfaces for the guestbook domain.

Interfaces are defined in the domain layer (dependency inversion).
Implementations live in the adapter and persistence layers.
"""

from guestbook.domain.repository.comment_store import (
    CommentStore,
    NewCommentPayload,
    StoreResponse,
)
from guestbook.domain.repository.session import SessionProvider

__all__ = [
    "CommentStore",
    "NewCommentPayload",
    "SessionProvider",
    "StoreResponse",
]
