"""Comment store interface.

The comment store is the remote data API that holds the authoritative flat
list. Implementations never raise on transport failure: they report it in the
returned ``StoreResponse`` so callers can map it to the domain error taxonomy.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel

from guestbook.domain.value import CommentId


class StoreResponse(BaseModel):
    """Outcome of a remote store call.

    ``data`` holds raw, not yet normalized rows: a list for fetches, a single
    mapping for creates.
    """

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "StoreResponse":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, error: str) -> "StoreResponse":
        return cls(success=False, error=error)


class NewCommentPayload(BaseModel):
    """Fields sent to the store when creating a comment.

    The store assigns ``id`` and ``created_at``.
    """

    author: str
    content: str
    email: Optional[str] = None
    device: str = ""
    is_admin: bool = False
    parent_id: Optional[CommentId] = None


class CommentStore(ABC):
    """Remote comment store.

    Defines the contract the comment tree engine depends on.
    Implementations live in the adapter and persistence layers.
    """

    @abstractmethod
    async def fetch_comments(self, limit: int = 100, offset: int = 0) -> StoreResponse:
        """Fetch raw comment rows.

        Args:
            limit: Maximum number of rows
            offset: Number of rows to skip

        Returns:
            Response whose data is a list of raw rows
        """
        pass

    @abstractmethod
    async def create_comment(self, payload: NewCommentPayload) -> StoreResponse:
        """Insert a comment.

        Args:
            payload: New comment fields

        Returns:
            Response whose data is the stored raw row
        """
        pass

    @abstractmethod
    async def update_like_count(self, comment_id: CommentId, new_count: int) -> StoreResponse:
        """Persist a comment's like counter.

        Args:
            comment_id: Comment to update
            new_count: New counter value
        """
        pass

    @abstractmethod
    async def delete_comment(self, comment_id: CommentId) -> StoreResponse:
        """Delete a comment.

        The store is expected to refuse callers without the admin role.

        Args:
            comment_id: Comment to delete
        """
        pass
