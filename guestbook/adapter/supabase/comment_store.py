"""Supabase (PostgREST) comment store."""

from typing import Any

import httpx
import logfire

from guestbook.adapter.error import ProviderError
from guestbook.config import SupabaseSettings
from guestbook.domain.repository import CommentStore, NewCommentPayload, StoreResponse
from guestbook.domain.value import CommentId

from .client import SupabaseEndpoint


def _column_id(value: CommentId) -> int | str:
    """Comment ids are bigint in the table; other ids pass through."""
    return int(value) if value.isdigit() else value


class SupabaseCommentStore(SupabaseEndpoint, CommentStore):
    """Comment store backed by the Supabase ``guestbook`` table.

    Every call returns a StoreResponse; transport, HTTP and decoding failures
    come back as ``StoreResponse.failed``.
    """

    def __init__(self, settings: SupabaseSettings) -> None:
        super().__init__(settings)
        self.table_url = self.rest_url(settings.comments_table)

    async def fetch_comments(self, limit: int = 100, offset: int = 0) -> StoreResponse:
        """Fetch rows newest first."""
        params = {
            "select": "*",
            "order": "created_at.desc",
            "limit": str(limit),
            "offset": str(offset),
        }
        try:
            async with self.client() as client:
                response = await client.get(
                    self.table_url, params=params, headers=self.headers()
                )
            rows = self.read_json(response)
        except (httpx.HTTPError, ProviderError) as e:
            logfire.error("Supabase fetch failed", error=str(e), limit=limit, offset=offset)
            return StoreResponse.failed(str(e))

        if not isinstance(rows, list):
            return StoreResponse.failed("Unexpected response payload")
        return StoreResponse.ok(rows)

    async def create_comment(self, payload: NewCommentPayload) -> StoreResponse:
        """Insert a comment and return the stored row."""
        row: dict[str, Any] = payload.model_dump(exclude={"parent_id"})
        if payload.parent_id is not None:
            row["parent_id"] = _column_id(payload.parent_id)

        try:
            async with self.client() as client:
                response = await client.post(
                    self.table_url,
                    json=[row],
                    headers=self.headers(representation=True),
                )
            created = self.read_json(response)
        except (httpx.HTTPError, ProviderError) as e:
            logfire.error("Supabase insert failed", error=str(e))
            return StoreResponse.failed(str(e))

        if not isinstance(created, list) or not created:
            return StoreResponse.failed("Insert returned no row")
        return StoreResponse.ok(created[0])

    async def update_like_count(self, comment_id: CommentId, new_count: int) -> StoreResponse:
        """Overwrite the ``likes`` column of one row."""
        return await self._write_one(
            "PATCH",
            comment_id,
            json={"likes": max(0, int(new_count))},
            missing="Comment to update was not found",
        )

    async def delete_comment(self, comment_id: CommentId) -> StoreResponse:
        """Delete one row; replies go with it through the foreign key cascade."""
        return await self._write_one(
            "DELETE",
            comment_id,
            missing="Comment to delete was not found",
        )

    async def _write_one(
        self,
        method: str,
        comment_id: CommentId,
        *,
        missing: str,
        json: dict[str, Any] | None = None,
    ) -> StoreResponse:
        params = {"id": f"eq.{_column_id(comment_id)}"}
        try:
            async with self.client() as client:
                response = await client.request(
                    method,
                    self.table_url,
                    params=params,
                    json=json,
                    headers=self.headers(representation=True),
                )
            rows = self.read_json(response)
        except (httpx.HTTPError, ProviderError) as e:
            logfire.error(
                "Supabase write failed",
                method=method,
                comment_id=comment_id,
                error=str(e),
            )
            return StoreResponse.failed(str(e))

        # Row level security filters silently: no row back means nothing changed
        if not isinstance(rows, list) or not rows:
            logfire.warn("Supabase write matched no rows", method=method, comment_id=comment_id)
            return StoreResponse.failed(missing)
        return StoreResponse.ok(rows)
