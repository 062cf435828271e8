"""Domain value objects for the guestbook."""

from guestbook.domain.value.identifiers import (
    CommentId,
    UserId,
    canonical_id,
    optional_canonical_id,
)
from guestbook.domain.value.types import (
    CommentAction,
    MutationState,
    NoticeLevel,
    Role,
    Session,
    ThreadStatus,
)

__all__ = [
    # Identifiers
    "CommentId",
    "UserId",
    "canonical_id",
    "optional_canonical_id",
    # Types
    "CommentAction",
    "MutationState",
    "NoticeLevel",
    "Role",
    "Session",
    "ThreadStatus",
]
