"""Notification routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from guestbook.application.usecase.comment import CommentTreeService
from guestbook.domain.service import Notice

router = APIRouter(prefix="/notifications", tags=["notifications"], route_class=DishkaRoute)


@router.get("", response_model=list[Notice])
async def list_notifications(service: FromDishka[CommentTreeService]) -> list[Notice]:
    """Return pending notices and dismiss them."""
    return service.notices()
