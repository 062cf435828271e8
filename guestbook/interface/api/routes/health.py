"""Health check routes."""

from datetime import datetime, timezone

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from guestbook.application.usecase.comment import CommentTreeService
from guestbook.config import Settings

router = APIRouter(tags=["health"], route_class=DishkaRoute)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    git_sha: str
    thread_status: str
    comments: int


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: FromDishka[Settings],
    service: FromDishka[CommentTreeService],
) -> HealthResponse:
    """Basic health check endpoint.

    Reports the load state of the thread alongside the process status; a
    failed load does not make the service unhealthy.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        git_sha=settings.git_sha,
        thread_status=service.thread.status.value,
        comments=service.thread.total,
    )
