"""Comment use cases."""

from .comment_tree_service import CommentTreeService
from .models import (
    DeleteConfirmation,
    DeleteResponse,
    ExportedComment,
    LikeResponse,
    ReplyContext,
    SubmitCommentRequest,
    SubmitCommentResponse,
    ThreadExport,
    ThreadStats,
)

__all__ = [
    "CommentTreeService",
    "DeleteConfirmation",
    "DeleteResponse",
    "ExportedComment",
    "LikeResponse",
    "ReplyContext",
    "SubmitCommentRequest",
    "SubmitCommentResponse",
    "ThreadExport",
    "ThreadStats",
]
