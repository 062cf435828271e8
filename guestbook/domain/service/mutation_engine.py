"""Comment mutation engine.

Applies reply, like and delete against the remote store and the local thread.
The two write paths differ on purpose:

- likes are optimistic: the local counter moves first and persistence runs in
  the background; a failed save is reported, never rolled back
- deletes are authoritative: nothing changes locally until the store confirms,
  because a delete cascades to every reply below the comment
"""

import asyncio
import re
from collections.abc import Awaitable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import logfire

from guestbook.config import CommentSettings
from guestbook.domain.error import (
    MaxDepthExceededError,
    MutationInProgressError,
    NotFoundError,
    ParentNotFoundError,
    PermissionDeniedError,
    RemoteError,
    ValidationError,
)
from guestbook.domain.model.comment import CommentRecord
from guestbook.domain.repository import CommentStore, NewCommentPayload, StoreResponse
from guestbook.domain.value import (
    CommentAction,
    CommentId,
    MutationState,
    NoticeLevel,
    canonical_id,
)

from .access_gate import AccessGate
from .comment_thread import CommentThread
from .notifier import Notifier, ThreadChanged
from .store_adapter import normalize_record

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# (action, target comment, request fingerprint)
MutationKey = tuple[CommentAction, CommentId | None, str]

TERMINAL_STATES = {
    MutationState.REJECTED,
    MutationState.SUCCEEDED,
    MutationState.FAILED,
}


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of a successful submit.

    ``flattened`` is set when the reply will be shown at the top level
    because its parent already sits at the maximum depth.
    """

    record: CommentRecord
    flattened: bool = False


class MutationEngine:
    """Domain service for comment writes."""

    def __init__(
        self,
        thread: CommentThread,
        comment_store: CommentStore,
        access_gate: AccessGate,
        notifier: Notifier,
        settings: CommentSettings,
    ) -> None:
        """Initialize mutation engine.

        Args:
            thread: Thread state holding the flat list and tree
            comment_store: Remote comment store
            access_gate: Delete authorization
            notifier: Notices and thread-changed signal
            settings: Comment limits and depth policy
        """
        self.thread = thread
        self.comment_store = comment_store
        self.access_gate = access_gate
        self.notifier = notifier
        self.settings = settings
        self._active: dict[MutationKey, MutationState] = {}
        self._background: set[asyncio.Task[None]] = set()

    # Request state

    def state_of(
        self, action: CommentAction, target: CommentId | None, fingerprint: str = ""
    ) -> MutationState:
        """Current state of a request; IDLE once it has finished."""
        return self._active.get((action, target, fingerprint), MutationState.IDLE)

    def in_flight(self) -> frozenset[tuple[CommentAction, CommentId | None]]:
        """(action, target) pairs with a request under way."""
        return frozenset((action, target) for action, target, _ in self._active)

    def _transition(self, key: MutationKey, state: MutationState) -> None:
        action, target, _ = key
        logfire.debug(
            "Mutation state changed",
            action=action.value,
            target=target,
            state=state.value,
        )
        if state in TERMINAL_STATES:
            self._active.pop(key, None)
        else:
            self._active[key] = state

    def _begin(self, key: MutationKey) -> None:
        action, target, _ = key
        if key in self._active:
            raise MutationInProgressError(action.value, target)
        self._transition(key, MutationState.VALIDATING)

    @contextmanager
    def _attempt(self, key: MutationKey) -> Iterator[None]:
        """Track one request through the state machine.

        Errors raised while validating reject the request, errors raised
        after the remote call started fail it.
        """
        self._begin(key)
        try:
            yield
        except BaseException:
            if self._active.get(key) == MutationState.SUBMITTING:
                self._transition(key, MutationState.FAILED)
            else:
                self._transition(key, MutationState.REJECTED)
            raise
        else:
            self._transition(key, MutationState.SUCCEEDED)

    def _publish(self, reason: str) -> None:
        self.notifier.publish(
            ThreadChanged(
                reason=reason,
                total=self.thread.total,
                version=self.thread.version,
            )
        )

    # Submit

    async def submit_comment(
        self,
        content: str,
        author: str,
        parent_id: Any = None,
        email: str | None = None,
        device: str = "",
    ) -> SubmitResult:
        """Create a top-level comment or a reply.

        Args:
            content: Comment text
            author: Display name
            parent_id: Comment being replied to (None for top-level)
            email: Optional contact email, validated when given
            device: Advisory provenance string

        Returns:
            Stored record and whether it will be flattened

        Raises:
            ValidationError: If input is invalid or the parent is unknown
            MutationInProgressError: If the same submission is in flight
            RemoteError: If the store rejects the write (nothing changes locally)
        """
        author = (author or "").strip()
        content = (content or "").strip()
        email = (email or "").strip() or None
        parent_key = self._parse_id(parent_id) if parent_id is not None else None
        key: MutationKey = (CommentAction.REPLY, parent_key, f"{author}\x00{content}")

        with logfire.span(
            "mutation_engine.submit_comment",
            parent_id=parent_key,
            content_length=len(content),
        ):
            with self._attempt(key):
                flattened = self._validate_submission(author, content, email, parent_key)

                # The admin badge is stamped from the submitter's own session
                session = await self.access_gate.refresh()
                payload = NewCommentPayload(
                    author=author,
                    content=content,
                    email=email,
                    device=device,
                    is_admin=self.access_gate.is_admin(session),
                    parent_id=parent_key,
                )

                self._transition(key, MutationState.SUBMITTING)
                response = await self._call_store(self.comment_store.create_comment(payload))
                if not response.success:
                    logfire.error(
                        "Comment submission failed",
                        parent_id=parent_key,
                        error=response.error,
                    )
                    raise RemoteError(f"Failed to save comment: {response.error}")

                try:
                    record = normalize_record(response.data or {})
                except ValueError as e:
                    logfire.error("Store returned malformed comment", error=str(e))
                    raise RemoteError("Store returned a malformed comment") from e

                self.thread.append(record)

            logfire.info(
                "Comment created",
                comment_id=record.id,
                parent_id=record.parent_id,
                flattened=flattened,
                is_admin=record.is_admin,
            )
            self._publish("comment_created")
            return SubmitResult(record=record, flattened=flattened)

    def _validate_submission(
        self,
        author: str,
        content: str,
        email: str | None,
        parent_id: CommentId | None,
    ) -> bool:
        """Validate a submission.

        Returns:
            True if the reply will be flattened to the top level
        """
        if not author:
            raise ValidationError("Author name is required")
        if not content:
            raise ValidationError("Comment content is required")
        if len(author) > self.settings.max_author_length:
            raise ValidationError(
                f"Author name must be at most {self.settings.max_author_length} characters"
            )
        if len(content) > self.settings.max_content_length:
            raise ValidationError(
                f"Comment must be at most {self.settings.max_content_length} characters"
            )
        if email is not None and not EMAIL_PATTERN.match(email):
            raise ValidationError("Email address is not valid")

        if parent_id is None:
            return False

        parent = self.thread.find_node(parent_id)
        if parent is None:
            raise ParentNotFoundError(parent_id)

        if parent.depth < self.thread.max_depth:
            return False

        if self.settings.reject_beyond_max_depth:
            raise MaxDepthExceededError(parent_id, self.thread.max_depth)

        logfire.warn(
            "Reply exceeds maximum depth and will be shown at top level",
            parent_id=parent_id,
            parent_depth=parent.depth,
            max_depth=self.thread.max_depth,
        )
        return True

    # Like

    async def like(self, comment_id: Any) -> int:
        """Like a comment.

        The local counter changes immediately; persisting it happens in the
        background (see ``wait_for_background``).

        Args:
            comment_id: Comment to like

        Returns:
            New like count

        Raises:
            NotFoundError: If the comment is not in the thread
            MutationInProgressError: If a like for this comment is still saving
        """
        cid = self._parse_id(comment_id)
        key: MutationKey = (CommentAction.LIKE, cid, "")

        with logfire.span("mutation_engine.like", comment_id=cid):
            record = self.thread.find_record(cid)
            if record is None:
                raise NotFoundError("Comment", cid)

            self._begin(key)
            updated = record.with_likes(record.likes + 1)
            self.thread.replace_record(updated)
            self._transition(key, MutationState.SUBMITTING)
            self._publish("comment_liked")

            task = asyncio.create_task(self._persist_like(key, cid, updated.likes))
            self._background.add(task)
            task.add_done_callback(self._background.discard)

            logfire.info("Comment liked", comment_id=cid, likes=updated.likes)
            return updated.likes

    async def _persist_like(self, key: MutationKey, comment_id: CommentId, likes: int) -> None:
        response = await self._call_store(
            self.comment_store.update_like_count(comment_id, likes)
        )
        if response.success:
            self._transition(key, MutationState.SUCCEEDED)
            return

        # Likes are an eventually-consistent counter: keep the local value
        self._transition(key, MutationState.FAILED)
        logfire.warn(
            "Like count could not be saved",
            comment_id=comment_id,
            likes=likes,
            error=response.error,
        )
        self.notifier.notify(NoticeLevel.WARNING, "Your like could not be saved yet")

    async def wait_for_background(self) -> None:
        """Wait until every background like persistence has finished."""
        while self._background:
            await asyncio.gather(*list(self._background))

    # Delete

    async def delete(self, comment_id: Any) -> int:
        """Delete a comment and every reply below it.

        Args:
            comment_id: Comment to delete

        Returns:
            Number of records removed (the comment plus its descendants)

        Raises:
            PermissionDeniedError: If the session may not delete (the store
                is never contacted)
            NotFoundError: If the comment is not in the thread
            RemoteError: If the store does not confirm (nothing changes locally)
        """
        cid = self._parse_id(comment_id)
        key: MutationKey = (CommentAction.DELETE, cid, "")

        with logfire.span("mutation_engine.delete", comment_id=cid):
            with self._attempt(key):
                session = await self.access_gate.refresh()
                if not self.access_gate.can_delete(session):
                    logfire.warn("Unauthorized delete attempt", comment_id=cid)
                    raise PermissionDeniedError("delete", cid)

                node = self.thread.find_node(cid)
                if node is None:
                    raise NotFoundError("Comment", cid)

                # Collected before the store call, from stored parent links
                doomed = self.thread.cascade_ids(cid)

                self._transition(key, MutationState.SUBMITTING)
                response = await self._call_store(self.comment_store.delete_comment(cid))
                if not response.success:
                    logfire.error(
                        "Comment delete failed",
                        comment_id=cid,
                        error=response.error,
                    )
                    raise RemoteError(f"Failed to delete comment: {response.error}")

                removed = self.thread.remove(doomed)

            logfire.info("Comment deleted", comment_id=cid, removed=removed)
            self._publish("comment_deleted")
            return removed

    # Helpers

    @staticmethod
    def _parse_id(value: Any) -> CommentId:
        try:
            return canonical_id(value)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    @staticmethod
    async def _call_store(call: Awaitable[StoreResponse]) -> StoreResponse:
        """Await a store call, folding unexpected exceptions into a failure."""
        try:
            return await call
        except Exception as e:
            logfire.error(
                "Comment store raised",
                error=str(e),
                error_type=type(e).__name__,
            )
            return StoreResponse.failed(str(e))
