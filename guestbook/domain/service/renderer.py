"""Comment renderer and action binder.

``render`` is a pure function of (tree, authorization, clock, load state,
in-flight actions): the same inputs always give an equal ThreadView. All
user-supplied text is HTML-escaped; the only markup that survives is a fixed
whitelist of inline tokens.
"""

import html
import math
import re
from collections.abc import Awaitable, Callable, Collection, Iterable, Iterator
from datetime import datetime
from functools import partial
from typing import Any

from guestbook.domain.model.comment import CommentNode
from guestbook.domain.model.view import ActionBinding, CommentView, ThreadPage, ThreadView
from guestbook.domain.value import CommentAction, CommentId, ThreadStatus

from .mutation_engine import MutationEngine

AVATAR_COLORS = (
    "linear-gradient(135deg, #4fc3f7, #29b6f6)",
    "linear-gradient(135deg, #9575cd, #7e57c2)",
    "linear-gradient(135deg, #4caf50, #2e7d32)",
    "linear-gradient(135deg, #ff9800, #f57c00)",
    "linear-gradient(135deg, #f44336, #d32f2f)",
)

UNKNOWN_DEVICE = "Unknown device"

STATUS_MESSAGES = {
    ThreadStatus.LOADING: "Loading comments...",
    ThreadStatus.EMPTY: "No comments yet. Be the first to leave one!",
    ThreadStatus.STALE: "Showing saved comments, the latest ones could not be loaded",
    ThreadStatus.FAILED: "Comments could not be loaded",
}

_BOLD = re.compile(r"\[b\](.*?)\[/b\]")
_ITALIC = re.compile(r"\[i\](.*?)\[/i\]")
_CODE = re.compile(r"\[code\](.*?)\[/code\]")
# Runs on escaped text: "&" only continues a URL as "&amp;", and trailing
# punctuation is left out of the link
_URL = re.compile(r"(https?://(?:[^\s<&]|&amp;)*(?:[^\s<&.,;:!?)\]]|&amp;))")

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY

InFlight = Collection[tuple[CommentAction, CommentId | None]]


def format_content(content: str) -> str:
    """Escape comment text and apply the inline formatting whitelist.

    Supported: [b]bold[/b], [i]italic[/i], [code]code[/code], bare http(s)
    URLs and line breaks.
    """
    text = html.escape(content, quote=True)
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    text = _ITALIC.sub(r"<em>\1</em>", text)
    text = _CODE.sub(r"<code>\1</code>", text)
    text = _URL.sub(r'<a href="\1" target="_blank" rel="noopener">\1</a>', text)
    return text.replace("\r\n", "\n").replace("\n", "<br>")


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def relative_time(created_at: datetime, now: datetime) -> str:
    """Human-relative timestamp label.

    < 1 minute "just now", then minutes, hours, days and weeks; anything
    older than 30 days shows the date.
    """
    seconds = (now - created_at).total_seconds()
    if seconds < MINUTE:
        return "just now"
    if seconds < HOUR:
        return _plural(int(seconds // MINUTE), "minute")
    if seconds < DAY:
        return _plural(int(seconds // HOUR), "hour")
    if seconds < WEEK:
        return _plural(int(seconds // DAY), "day")
    if seconds < MONTH:
        return _plural(int(seconds // WEEK), "week")
    return created_at.strftime("%b %d, %Y")


def avatar_color(name: str) -> str:
    """Stable avatar color for an author name."""
    return AVATAR_COLORS[sum(ord(char) for char in name) % len(AVATAR_COLORS)]


def render(
    tree: list[CommentNode],
    authorized: bool,
    *,
    now: datetime,
    status: ThreadStatus = ThreadStatus.READY,
    in_flight: InFlight = (),
) -> ThreadView:
    """Render the comment tree.

    Args:
        tree: Root nodes from the tree builder
        authorized: Whether delete affordances are shown
        now: Reference time for relative labels
        status: Load state of the thread
        in_flight: (action, comment) pairs whose affordance is disabled

    Returns:
        Display structure for the whole thread
    """
    comments = [_render_node(node, authorized, now, in_flight) for node in tree]
    total = sum(1 + comment.reply_count for comment in comments)

    if status == ThreadStatus.READY and not comments:
        status = ThreadStatus.EMPTY

    return ThreadView(
        status=status,
        message=STATUS_MESSAGES.get(status),
        authorized=authorized,
        total=total,
        comments=comments,
    )


def _render_node(
    node: CommentNode, authorized: bool, now: datetime, in_flight: InFlight
) -> CommentView:
    record = node.record
    replies = [_render_node(child, authorized, now, in_flight) for child in node.children]

    actions = [CommentAction.REPLY, CommentAction.LIKE]
    if authorized:
        actions.append(CommentAction.DELETE)

    return CommentView(
        comment_id=record.id,
        author=html.escape(record.author),
        author_initial=html.escape(record.author[:1].upper() or "?"),
        avatar_color=avatar_color(record.author),
        is_admin=record.is_admin,
        content_html=format_content(record.content),
        created_at=record.created_at,
        time_label=relative_time(record.created_at, now),
        device=html.escape(record.device) if record.device else UNKNOWN_DEVICE,
        likes=record.likes,
        depth=node.depth,
        reply_count=sum(1 + reply.reply_count for reply in replies),
        actions=[
            ActionBinding(
                action=action,
                comment_id=record.id,
                enabled=(action, record.id) not in in_flight,
            )
            for action in actions
        ],
        replies=replies,
    )


def iter_views(comments: Iterable[CommentView]) -> Iterator[CommentView]:
    """Walk rendered comments in display order."""
    stack = list(reversed(list(comments)))
    while stack:
        comment = stack.pop()
        yield comment
        stack.extend(reversed(comment.replies))


def paginate(view: ThreadView, page: int, per_page: int) -> ThreadPage:
    """Slice the root threads of a view into one page.

    Out-of-range pages are clamped to the nearest valid page.
    """
    total_pages = max(1, math.ceil(len(view.comments) / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    return ThreadPage(
        **view.model_dump(exclude={"comments"}),
        comments=view.comments[start : start + per_page],
        page=page,
        per_page=per_page,
        total_pages=total_pages,
    )


Handler = Callable[..., Awaitable[Any]]
Bindings = dict[tuple[CommentAction, CommentId], Handler]


class CommentBinder:
    """Connects rendered affordances to mutation engine calls.

    The display is replaced on every render, so the binding table is rebuilt
    from scratch each time rather than patched.
    """

    def __init__(self, engine: MutationEngine) -> None:
        """Initialize binder.

        Args:
            engine: Mutation engine the affordances call into
        """
        self.engine = engine

    def bind(self, view: ThreadView) -> Bindings:
        """Build the handler table for every enabled affordance in a view."""
        bindings: Bindings = {}
        for comment in iter_views(view.comments):
            for binding in comment.actions:
                if binding.enabled:
                    bindings[(binding.action, comment.comment_id)] = self._handler(
                        binding.action, comment.comment_id
                    )
        return bindings

    def _handler(self, action: CommentAction, comment_id: CommentId) -> Handler:
        if action == CommentAction.REPLY:
            return partial(self.engine.submit_comment, parent_id=comment_id)
        if action == CommentAction.LIKE:
            return partial(self.engine.like, comment_id)
        return partial(self.engine.delete, comment_id)
