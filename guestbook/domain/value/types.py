"""Domain value objects for the guestbook.

Value objects are immutable and defined by their values, not identity.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from guestbook.domain.value.identifiers import UserId


class Role(str, Enum):
    """Role of the signed-in user."""

    ADMIN = "admin"
    USER = "user"


class CommentAction(str, Enum):
    """Interactive affordances on a rendered comment."""

    REPLY = "reply"
    LIKE = "like"
    DELETE = "delete"


class MutationState(str, Enum):
    """Lifecycle of a single mutation request.

    IDLE -> VALIDATING -> (REJECTED | SUBMITTING) -> (SUCCEEDED | FAILED)
    """

    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ThreadStatus(str, Enum):
    """Load state of the comment thread.

    EMPTY and FAILED are distinct: "no comments yet" is not "failed to load".
    """

    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    STALE = "stale"  # Showing last good data after a failed load
    FAILED = "failed"


class NoticeLevel(str, Enum):
    """Severity of a user-visible notice."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Session(BaseModel):
    """Snapshot of the externally-owned auth session."""

    model_config = ConfigDict(frozen=True)

    signed_in: bool = False
    role: Role = Role.USER
    user_id: UserId | None = None
    email: str | None = None

    @classmethod
    def anonymous(cls) -> "Session":
        """Session for a visitor who is not signed in."""
        return cls(signed_in=False, role=Role.USER)
