"""Request and response models for the comment tree service."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SubmitCommentRequest(BaseModel):
    """New top-level comment or reply."""

    author: str
    content: str
    email: Optional[str] = None
    device: str = ""


class SubmitCommentResponse(BaseModel):
    """Stored comment as the thread now holds it."""

    comment_id: str
    parent_id: Optional[str]
    author: str
    created_at: datetime
    is_admin: bool
    flattened: bool  # Shown at the top level because the parent is too deep


class LikeResponse(BaseModel):
    comment_id: str
    likes: int


class DeleteConfirmation(BaseModel):
    """What a delete would remove, shown before the user confirms."""

    comment_id: str
    author: str
    reply_count: int
    authorized: bool


class DeleteResponse(BaseModel):
    comment_id: str
    removed: int


class ReplyContext(BaseModel):
    """Banner shown above the form while replying."""

    parent_id: str
    author: str
    preview: str  # First 100 characters of the parent
    mention: str


class ThreadStats(BaseModel):
    """Comment counters."""

    total: int
    today: int  # Created on the current UTC day
    admin: int


class ExportedComment(BaseModel):
    """Comment in the nested export format."""

    id: str
    parent_id: Optional[str]
    author: str
    email: Optional[str]
    content: str
    created_at: datetime
    likes: int
    device: str
    is_admin: bool
    replies: list["ExportedComment"] = []


class ThreadExport(BaseModel):
    """Full thread export."""

    export_time: datetime
    total_comments: int
    comments: list[ExportedComment]
