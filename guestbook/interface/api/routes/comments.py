"""Comment routes."""

import logfire
from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Header, Query, status
from pydantic import BaseModel

from guestbook.application.usecase.comment import (
    CommentTreeService,
    DeleteConfirmation,
    DeleteResponse,
    LikeResponse,
    ReplyContext,
    SubmitCommentRequest,
    SubmitCommentResponse,
    ThreadExport,
    ThreadStats,
)
from guestbook.domain.error import DomainError
from guestbook.domain.model import ThreadPage
from guestbook.interface.api.device import device_from_user_agent
from guestbook.interface.error import to_http_exception

router = APIRouter(prefix="/comments", tags=["comments"], route_class=DishkaRoute)


class SubmitCommentAPIRequest(BaseModel):
    """API request for a comment or reply.

    Lengths and email format are checked by the mutation engine so every
    rejection comes back as the same 400 response.
    """

    author: str
    content: str
    email: str | None = None


def _submission(request: SubmitCommentAPIRequest, user_agent: str | None) -> SubmitCommentRequest:
    return SubmitCommentRequest(
        author=request.author,
        content=request.content,
        email=request.email,
        device=device_from_user_agent(user_agent),
    )


@router.get("", response_model=ThreadPage)
async def list_comments(
    service: FromDishka[CommentTreeService],
    page: int = Query(default=1, ge=1),
) -> ThreadPage:
    """Get one page of the rendered comment tree.

    Args:
        service: Comment tree service from DI
        page: 1-based page of root threads (clamped to the last page)

    Returns:
        Rendered threads with load status and paging info
    """
    return await service.view(page)


@router.post("", response_model=SubmitCommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    request: SubmitCommentAPIRequest,
    service: FromDishka[CommentTreeService],
    user_agent: str | None = Header(default=None),
) -> SubmitCommentResponse:
    """Post a top-level comment."""
    try:
        return await service.submit_top_level(_submission(request, user_agent))
    except DomainError as e:
        raise to_http_exception(e) from e


@router.post(
    "/refresh",
    response_model=ThreadPage,
)
async def refresh_comments(service: FromDishka[CommentTreeService]) -> ThreadPage:
    """Reload the thread from the store and return the first page."""
    await service.notify_external_change()
    return await service.view(1)


@router.get("/stats", response_model=ThreadStats)
async def comment_stats(service: FromDishka[CommentTreeService]) -> ThreadStats:
    """Comment counters (total, today, by admins)."""
    return service.stats()


@router.get("/export", response_model=ThreadExport)
async def export_comments(service: FromDishka[CommentTreeService]) -> ThreadExport:
    """Export the whole thread as nested JSON.

    Requires an admin session.
    """
    try:
        return await service.export()
    except DomainError as e:
        raise to_http_exception(e) from e


@router.post(
    "/{comment_id}/replies",
    response_model=SubmitCommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_comment(
    comment_id: str,
    request: SubmitCommentAPIRequest,
    service: FromDishka[CommentTreeService],
    user_agent: str | None = Header(default=None),
) -> SubmitCommentResponse:
    """Reply to a comment.

    Replies below the maximum depth are shown at the top level; the
    response reports this as ``flattened``.
    """
    try:
        return await service.submit_reply(comment_id, _submission(request, user_agent))
    except DomainError as e:
        raise to_http_exception(e) from e


@router.get("/{comment_id}/reply-context", response_model=ReplyContext)
async def reply_context(
    comment_id: str, service: FromDishka[CommentTreeService]
) -> ReplyContext:
    """Preview of the comment being replied to."""
    try:
        return service.reply_context(comment_id)
    except DomainError as e:
        raise to_http_exception(e) from e


@router.post("/{comment_id}/like", response_model=LikeResponse)
async def like_comment(
    comment_id: str, service: FromDishka[CommentTreeService]
) -> LikeResponse:
    """Like a comment.

    The new count is returned immediately and saved in the background.
    """
    try:
        return await service.like(comment_id)
    except DomainError as e:
        raise to_http_exception(e) from e


@router.get("/{comment_id}/delete-confirmation", response_model=DeleteConfirmation)
async def delete_confirmation(
    comment_id: str, service: FromDishka[CommentTreeService]
) -> DeleteConfirmation:
    """Describe what deleting a comment would remove."""
    try:
        return await service.request_delete(comment_id)
    except DomainError as e:
        raise to_http_exception(e) from e


@router.delete("/{comment_id}", response_model=DeleteResponse)
async def delete_comment(
    comment_id: str, service: FromDishka[CommentTreeService]
) -> DeleteResponse:
    """Delete a comment and all of its replies.

    Requires an admin session.
    """
    try:
        return await service.delete(comment_id)
    except DomainError as e:
        logfire.info("Delete request refused", comment_id=comment_id, error=str(e))
        raise to_http_exception(e) from e
