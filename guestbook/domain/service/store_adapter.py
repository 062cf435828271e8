"""Flat store adapter.

Separates the untrusted external row shape from the canonical CommentRecord.
Remote rows come in several dialects: the current table uses snake_case
columns, older cached/exported data used camelCase, ``timestamp`` instead of
``created_at`` and nested ``replies`` arrays. All of them normalize here.

Defaulting rules:
- likes: 0 (missing, null or negative)
- device: ""
- is_admin: False
- author: "Anonymous"
- content: ""
Rows without an id or a usable timestamp are skipped.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import logfire
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from guestbook.domain.error import FetchError
from guestbook.domain.model.comment import CommentRecord
from guestbook.domain.repository import CommentStore


DEFAULT_AUTHOR = "Anonymous"


class RawCommentRecord(BaseModel):
    """Comment row exactly as the remote store (or legacy data) hands it over."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Any = None
    parent_id: Any = Field(
        default=None, validation_alias=AliasChoices("parent_id", "parentId")
    )
    author: Optional[str] = None
    email: Optional[str] = None
    content: Optional[str] = None
    created_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt", "timestamp"),
    )
    likes: Optional[int] = None
    device: Optional[str] = None
    is_admin: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("is_admin", "isAdmin")
    )
    replies: Optional[list[dict[str, Any]]] = None

    def to_record(self) -> CommentRecord:
        """Convert to the canonical record, applying defaults.

        Raises:
            ValueError: If the row has no id or no timestamp
        """
        if self.id is None:
            raise ValueError("Comment row has no id")
        if self.created_at is None:
            raise ValueError(f"Comment row {self.id} has no timestamp")

        return CommentRecord(
            id=self.id,
            parent_id=self.parent_id,
            author=self.author or DEFAULT_AUTHOR,
            content=self.content or "",
            email=self.email or None,
            created_at=self.created_at,
            likes=max(0, self.likes or 0),
            device=self.device or "",
            is_admin=bool(self.is_admin),
        )


def normalize_record(raw: Mapping[str, Any]) -> CommentRecord:
    """Normalize a single raw row.

    Args:
        raw: Row as returned by the store

    Returns:
        Canonical record

    Raises:
        ValueError: If the row is malformed
    """
    return RawCommentRecord.model_validate(raw).to_record()


def normalize_records(rows: Iterable[Any]) -> list[CommentRecord]:
    """Normalize a batch of raw rows, skipping malformed ones.

    Nested ``replies`` are flattened with their parent reference filled in.

    Args:
        rows: Raw rows

    Returns:
        Canonical records in input order (a reply follows its container)
    """
    records: list[CommentRecord] = []
    pending: list[tuple[Any, Any]] = [(row, None) for row in reversed(list(rows))]

    while pending:
        row, container_id = pending.pop()
        if not isinstance(row, Mapping):
            logfire.warn("Skipping non-object comment row", row_type=type(row).__name__)
            continue
        try:
            raw = RawCommentRecord.model_validate(row)
            if raw.parent_id is None and container_id is not None:
                raw.parent_id = container_id
            record = raw.to_record()
        except ValueError as e:
            logfire.warn("Skipping malformed comment row", error=str(e))
            continue

        records.append(record)
        for reply in reversed(raw.replies or []):
            pending.append((reply, record.id))

    return records


@dataclass(frozen=True)
class LoadResult:
    """Outcome of a load: either records or a fetch error."""

    records: list[CommentRecord] = field(default_factory=list)
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FlatStoreAdapter:
    """Loads and normalizes the flat list from the comment store."""

    def __init__(self, comment_store: CommentStore, fetch_limit: int = 100) -> None:
        """Initialize the adapter.

        Args:
            comment_store: Remote comment store
            fetch_limit: Maximum rows per load
        """
        self.comment_store = comment_store
        self.fetch_limit = fetch_limit

    async def load(self) -> LoadResult:
        """Fetch and normalize all comments.

        Never raises: transport and shape failures come back as a
        ``LoadResult`` carrying a FetchError.

        Returns:
            Load result
        """
        with logfire.span("store_adapter.load", limit=self.fetch_limit):
            try:
                response = await self.comment_store.fetch_comments(limit=self.fetch_limit)
            except Exception as e:
                logfire.error("Comment store raised during fetch", error=str(e))
                return LoadResult(error=FetchError(str(e)))

            if not response.success:
                logfire.error("Comment fetch failed", error=response.error)
                return LoadResult(error=FetchError(response.error or "Unknown error"))

            data = response.data if response.data is not None else []
            if not isinstance(data, list):
                logfire.error(
                    "Comment fetch returned unexpected payload",
                    payload_type=type(data).__name__,
                )
                return LoadResult(error=FetchError("Unexpected response payload"))

            records = normalize_records(data)
            logfire.info(
                "Comments loaded",
                rows=len(data),
                records=len(records),
            )
            return LoadResult(records=records)
