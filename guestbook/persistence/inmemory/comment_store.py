"""In-memory comment store for testing."""

from datetime import datetime, timezone
from typing import Any

from guestbook.domain.repository import CommentStore, NewCommentPayload, StoreResponse
from guestbook.domain.value import CommentId


class InMemoryCommentStore(CommentStore):
    """In-memory implementation of CommentStore.

    Rows are kept in the remote (snake_case) shape so the adapter's
    normalization runs exactly as it does against the real store. Operations
    listed in ``failing`` report a failure instead of applying.
    """

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self._rows: dict[str, dict[str, Any]] = {}
        self._next_id = 1
        self.failing: set[str] = set()
        self.calls: list[tuple[str, Any]] = []
        for row in rows or []:
            self.seed(row)

    def seed(self, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row as-is (tests use this to set up existing comments)."""
        row = dict(row)
        if row.get("id") is None:
            row["id"] = self._next_id
        self._rows[str(row["id"])] = row
        if isinstance(row["id"], int):
            self._next_id = max(self._next_id, row["id"] + 1)
        return row

    def rows(self) -> list[dict[str, Any]]:
        return [dict(row) for row in self._rows.values()]

    def get(self, comment_id: CommentId) -> dict[str, Any] | None:
        return self._rows.get(str(comment_id))

    async def fetch_comments(self, limit: int = 100, offset: int = 0) -> StoreResponse:
        """Return rows newest first."""
        self.calls.append(("fetch", None))
        if "fetch" in self.failing:
            return StoreResponse.failed("fetch unavailable")
        rows = sorted(
            self._rows.values(),
            key=lambda row: str(row.get("created_at", "")),
            reverse=True,
        )
        return StoreResponse.ok([dict(row) for row in rows[offset : offset + limit]])

    async def create_comment(self, payload: NewCommentPayload) -> StoreResponse:
        """Store a comment, assigning id and created_at."""
        self.calls.append(("create", payload))
        if "create" in self.failing:
            return StoreResponse.failed("insert rejected")
        row = {
            "id": self._next_id,
            "parent_id": int(payload.parent_id)
            if payload.parent_id and payload.parent_id.isdigit()
            else payload.parent_id,
            "author": payload.author,
            "email": payload.email,
            "content": payload.content,
            "device": payload.device,
            "is_admin": payload.is_admin,
            "likes": 0,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        self._next_id += 1
        self._rows[str(row["id"])] = row
        return StoreResponse.ok(dict(row))

    async def update_like_count(self, comment_id: CommentId, new_count: int) -> StoreResponse:
        """Overwrite the like counter."""
        self.calls.append(("like", (comment_id, new_count)))
        if "like" in self.failing:
            return StoreResponse.failed("update rejected")
        row = self._rows.get(str(comment_id))
        if row is None:
            return StoreResponse.failed("Comment not found")
        row["likes"] = new_count
        return StoreResponse.ok(dict(row))

    async def delete_comment(self, comment_id: CommentId) -> StoreResponse:
        """Delete a comment and, like the table's foreign key, its replies."""
        self.calls.append(("delete", comment_id))
        if "delete" in self.failing:
            return StoreResponse.failed("delete rejected")
        if str(comment_id) not in self._rows:
            return StoreResponse.failed("Comment not found")

        doomed = {str(comment_id)}
        changed = True
        while changed:
            changed = False
            for key, row in self._rows.items():
                parent = row.get("parent_id")
                if key not in doomed and parent is not None and str(parent) in doomed:
                    doomed.add(key)
                    changed = True
        for key in doomed:
            del self._rows[key]
        return StoreResponse.ok([{"id": key} for key in doomed])
