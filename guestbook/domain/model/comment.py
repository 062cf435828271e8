"""Comment entities.

A CommentRecord is one row of the authoritative flat list. A CommentNode is
the derived tree projection of a record: it is rebuilt from the flat list on
every change and never edited on its own.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, field_validator

from guestbook.domain.model.common import DomainModel
from guestbook.domain.value import CommentId, canonical_id, optional_canonical_id


class CommentRecord(DomainModel):
    """Canonical comment record.

    Only ``likes`` ever changes after creation, and only through
    ``with_likes`` (records are immutable).
    """

    id: CommentId
    parent_id: Optional[CommentId] = None
    author: str
    content: str
    email: Optional[str] = None
    created_at: datetime
    likes: int = Field(default=0, ge=0)
    device: str = ""
    is_admin: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, v: object) -> CommentId:
        """Canonicalize the record id."""
        return canonical_id(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_parent_id(cls, v: object) -> CommentId | None:
        """Canonicalize the parent reference."""
        return optional_canonical_id(v)

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC so all records sort together."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def with_likes(self, likes: int) -> "CommentRecord":
        """Return a copy with a new like count."""
        return self.model_copy(update={"likes": max(0, likes)})


@dataclass
class CommentNode:
    """Node in the comment tree.

    Wraps a record with its effective depth and ordered children.
    """

    record: CommentRecord
    depth: int = 0
    children: list["CommentNode"] = field(default_factory=list)

    @property
    def id(self) -> CommentId:
        return self.record.id

    @property
    def created_at(self) -> datetime:
        return self.record.created_at
