"""Domain model entities for the guestbook."""

from guestbook.domain.model.comment import CommentNode, CommentRecord
from guestbook.domain.model.view import ActionBinding, CommentView, ThreadPage, ThreadView

__all__ = [
    "ActionBinding",
    "CommentNode",
    "CommentRecord",
    "CommentView",
    "ThreadPage",
    "ThreadView",
]
