"""Display structures produced by the renderer.

Views are immutable and compared by value, so rendering the same tree twice
yields equal views.
"""

from datetime import datetime
from typing import Optional

from guestbook.domain.model.common import DomainModel
from guestbook.domain.value import CommentAction, CommentId, ThreadStatus


class ActionBinding(DomainModel):
    """An affordance shown on a comment (reply, like or delete)."""

    action: CommentAction
    comment_id: CommentId
    enabled: bool = True  # Disabled while the same action is submitting


class CommentView(DomainModel):
    """Rendered comment with its nested replies."""

    comment_id: CommentId
    author: str  # Escaped
    author_initial: str
    avatar_color: str
    is_admin: bool
    content_html: str  # Escaped, whitelisted inline formatting only
    created_at: datetime
    time_label: str
    device: str  # Escaped
    likes: int
    depth: int
    reply_count: int
    actions: list[ActionBinding]
    replies: list["CommentView"]


class ThreadView(DomainModel):
    """Rendered thread: roots with nested replies plus load state."""

    status: ThreadStatus
    message: Optional[str] = None
    authorized: bool = False
    total: int = 0
    comments: list[CommentView] = []


class ThreadPage(ThreadView):
    """One page of root threads."""

    page: int = 1
    per_page: int = 10
    total_pages: int = 1
