"""Comment tree service.

Orchestrates the domain services behind one injectable object: loading (with
the in-memory and on-disk fallbacks), rendering, binding and the user-facing
operations. The HTTP layer and any other embedding talk only to this class.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

import logfire

from guestbook.config import CommentSettings
from guestbook.domain.error import (
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from guestbook.domain.model import CommentNode, CommentRecord, ThreadPage, ThreadView
from guestbook.domain.service import (
    AccessGate,
    CommentBinder,
    CommentThread,
    FlatStoreAdapter,
    MutationEngine,
    Notice,
    Notifier,
    ThreadChanged,
    ThreadListener,
    paginate,
    render,
)
from guestbook.domain.service.renderer import Bindings, Handler
from guestbook.domain.value import CommentAction, CommentId, NoticeLevel, canonical_id
from guestbook.persistence.cache import FlatListCache

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

REPLY_PREVIEW_LENGTH = 100

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommentTreeService:
    """Application service for the guestbook comment tree."""

    def __init__(
        self,
        thread: CommentThread,
        adapter: FlatStoreAdapter,
        engine: MutationEngine,
        access_gate: AccessGate,
        notifier: Notifier,
        binder: CommentBinder,
        settings: CommentSettings,
        cache: FlatListCache | None = None,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the service.

        Args:
            thread: Flat list and tree state
            adapter: Loads the flat list from the store
            engine: Applies writes
            access_gate: Delete authorization
            notifier: Notices and thread-changed signal
            binder: Builds action bindings for each render
            settings: Comment settings (page size)
            cache: Optional on-disk fallback for failed loads
            clock: Source of the current time
        """
        self.thread = thread
        self.adapter = adapter
        self.engine = engine
        self.access_gate = access_gate
        self.notifier = notifier
        self.binder = binder
        self.settings = settings
        self.cache = cache
        self.clock = clock

        self._view = ThreadView(status=thread.status)
        self._bindings: Bindings = {}
        self.notifier.subscribe(self._on_thread_changed)

    # Loading

    async def initialize(self) -> ThreadView:
        """Read the session and load the thread for the first time."""
        with logfire.span("comment_tree.initialize"):
            await self.access_gate.refresh()
            await self._load("initial_load")
            return self._view

    async def refresh(self) -> ThreadView:
        """Reload the thread from the store."""
        with logfire.span("comment_tree.refresh"):
            await self.access_gate.refresh()
            await self._load("refresh")
            return self._view

    async def notify_external_change(self) -> ThreadView:
        """Resync after another component changed comments behind our back."""
        logfire.info("External comment change reported")
        return await self.refresh()

    async def _load(self, reason: str) -> None:
        result = await self.adapter.load()
        if result.ok:
            self.thread.replace_all(result.records)
            if self.cache is not None:
                self.cache.save(result.records)
        else:
            error = str(result.error)
            cached = None
            if not self.thread.has_good_data and self.cache is not None:
                cached = self.cache.load(now=self.clock())

            if cached is not None:
                self.thread.replace_all(cached, stale=True)
                self.thread.last_error = error
                logfire.warn("Serving comments from local cache", count=len(cached))
                self.notifier.notify(
                    NoticeLevel.WARNING,
                    "Showing saved comments, the latest ones could not be loaded",
                )
            else:
                self.thread.mark_failed(error)
                self.notifier.notify(NoticeLevel.ERROR, "Comments could not be loaded")

        self.notifier.publish(
            ThreadChanged(reason=reason, total=self.thread.total, version=self.thread.version)
        )

    # Rendering

    def _on_thread_changed(self, event: ThreadChanged) -> None:
        self._rerender()

    def _rerender(self, authorized: bool | None = None) -> None:
        if authorized is None:
            authorized = self.access_gate.can_delete()
        self._view = render(
            self.thread.tree,
            authorized,
            now=self.clock(),
            status=self.thread.status,
            in_flight=self.engine.in_flight(),
        )
        self._bindings = self.binder.bind(self._view)

    async def view(self, page: int = 1) -> ThreadPage:
        """Render the thread for the caller's session and return one page."""
        session = await self.access_gate.refresh()
        self._rerender(self.access_gate.can_delete(session))
        return paginate(self._view, page, self.settings.per_page)

    def bindings(self) -> Bindings:
        """Action bindings of the latest render."""
        return dict(self._bindings)

    def subscribe(self, listener: ThreadListener) -> Callable[[], None]:
        """Register for thread-changed signals (returns the unsubscribe)."""
        return self.notifier.subscribe(listener)

    def notices(self) -> list[Notice]:
        """Return and dismiss pending notices."""
        return self.notifier.drain()

    # Actions

    def _handler(self, action: CommentAction, comment_id: CommentId) -> Handler | None:
        if (action, comment_id) not in self._bindings:
            self._rerender()
        return self._bindings.get((action, comment_id))

    @contextmanager
    def _reporting(self, action: str) -> Iterator[None]:
        """Turn a failed action into a notice and re-raise it."""
        try:
            yield
        except ValidationError as e:
            self.notifier.notify(NoticeLevel.WARNING, str(e))
            raise
        except DomainError as e:
            logfire.info("Comment action failed", action=action, error=str(e))
            self.notifier.notify(NoticeLevel.ERROR, str(e))
            raise

    async def submit_top_level(self, request: SubmitCommentRequest) -> SubmitCommentResponse:
        """Post a new top-level comment."""
        with self._reporting("submit"):
            result = await self.engine.submit_comment(
                request.content,
                request.author,
                email=request.email,
                device=request.device,
            )
        return self._submitted(result.record, result.flattened)

    async def submit_reply(
        self, parent_id: Any, request: SubmitCommentRequest
    ) -> SubmitCommentResponse:
        """Reply to an existing comment.

        Goes through the reply binding of the parent when one is rendered;
        otherwise the engine is called directly and applies the same rules.
        """
        with self._reporting("reply"):
            pid = _comment_id(parent_id)
            handler = self._handler(CommentAction.REPLY, pid)
            if handler is None:
                result = await self.engine.submit_comment(
                    request.content,
                    request.author,
                    parent_id=pid,
                    email=request.email,
                    device=request.device,
                )
            else:
                result = await handler(
                    request.content,
                    request.author,
                    email=request.email,
                    device=request.device,
                )
        if result.flattened:
            self.notifier.notify(
                NoticeLevel.INFO,
                "The thread is too deep, your reply is shown at the top level",
            )
        return self._submitted(result.record, result.flattened)

    def _submitted(self, record: CommentRecord, flattened: bool) -> SubmitCommentResponse:
        self.notifier.notify(NoticeLevel.SUCCESS, "Comment posted")
        return SubmitCommentResponse(
            comment_id=record.id,
            parent_id=record.parent_id,
            author=record.author,
            created_at=record.created_at,
            is_admin=record.is_admin,
            flattened=flattened,
        )

    async def like(self, comment_id: Any) -> LikeResponse:
        """Like a comment; the count is saved in the background."""
        with self._reporting("like"):
            cid = _comment_id(comment_id)
            handler = self._handler(CommentAction.LIKE, cid)
            likes = await (handler() if handler is not None else self.engine.like(cid))
        return LikeResponse(comment_id=cid, likes=likes)

    async def request_delete(self, comment_id: Any) -> DeleteConfirmation:
        """Describe what deleting a comment would remove."""
        cid = _comment_id(comment_id)
        session = await self.access_gate.refresh()
        node = self.thread.find_node(cid)
        if node is None:
            raise NotFoundError("Comment", cid)
        return DeleteConfirmation(
            comment_id=cid,
            author=node.record.author,
            reply_count=len(self.thread.cascade_ids(cid)) - 1,
            authorized=self.access_gate.can_delete(session),
        )

    async def delete(self, comment_id: Any) -> DeleteResponse:
        """Delete a comment and its replies.

        The engine re-reads the session itself, so the call is made even
        when the last render showed no delete affordance.
        """
        with self._reporting("delete"):
            cid = _comment_id(comment_id)
            handler = self._handler(CommentAction.DELETE, cid)
            removed = await (handler() if handler is not None else self.engine.delete(cid))
        self.notifier.notify(
            NoticeLevel.SUCCESS,
            f"Deleted {removed} comment{'' if removed == 1 else 's'}",
        )
        return DeleteResponse(comment_id=cid, removed=removed)

    def reply_context(self, parent_id: Any) -> ReplyContext:
        """Preview of the comment being replied to."""
        pid = _comment_id(parent_id)
        record = self.thread.find_record(pid)
        if record is None:
            raise NotFoundError("Comment", pid)
        preview = record.content[:REPLY_PREVIEW_LENGTH]
        if len(record.content) > REPLY_PREVIEW_LENGTH:
            preview += "..."
        return ReplyContext(
            parent_id=pid,
            author=record.author,
            preview=preview,
            mention=f"@{record.author} ",
        )

    # Reporting

    def stats(self) -> ThreadStats:
        today = self.clock().astimezone(timezone.utc).date()
        records = {record.id: record for record in self.thread.records}.values()
        return ThreadStats(
            total=self.thread.total,
            today=sum(
                1
                for record in records
                if record.created_at.astimezone(timezone.utc).date() == today
            ),
            admin=sum(1 for record in records if record.is_admin),
        )

    async def export(self) -> ThreadExport:
        """Export the whole thread as nested JSON (admins only).

        Raises:
            PermissionDeniedError: If the session is not an admin
        """
        session = await self.access_gate.refresh()
        if not self.access_gate.is_admin(session):
            raise PermissionDeniedError("export")

        logfire.info("Comments exported", total=self.thread.total)
        return ThreadExport(
            export_time=self.clock(),
            total_comments=self.thread.total,
            comments=[_export_node(node) for node in self.thread.tree],
        )


def _comment_id(value: Any) -> CommentId:
    try:
        return canonical_id(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _export_node(node: CommentNode) -> ExportedComment:
    record = node.record
    return ExportedComment(
        **record.model_dump(),
        replies=[_export_node(child) for child in node.children],
    )
