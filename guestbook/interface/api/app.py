"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import uuid4

from dishka import AsyncContainer
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from guestbook.adapter.supabase import use_access_token
from guestbook.application.usecase.comment import CommentTreeService
from guestbook.config import Settings
from guestbook.domain.service import use_audience
from guestbook.interface.api.routes import comments, health, notifications
from guestbook.util.di.container import create_container, setup_di
from guestbook.util.observability import instrument_fastapi, instrument_httpx

# Identifies a visitor so notices reach only the client that caused them
CLIENT_HEADER = "X-Guestbook-Client"
CLIENT_COOKIE = "guestbook_client"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the thread on startup and let pending like saves finish on shutdown."""
    container: AsyncContainer = app.state.dishka_container
    service = await container.get(CommentTreeService)
    await service.initialize()
    yield
    await service.engine.wait_for_background()
    await container.close()


def create_app(container: AsyncContainer | None = None, instrument: bool = True) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.

    Args:
        container: DI container; the production container when omitted
        instrument: Whether to attach Logfire instrumentation
    """
    settings = Settings()

    if instrument:
        # Logfire must be configured before instrumentation
        instrument_httpx()

    app_instance = FastAPI(
        title="Guestbook API",
        description="Nested comment threads for the guestbook",
        version="0.1.0",
        lifespan=lifespan,
    )

    if instrument:
        instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "User-Agent",
            CLIENT_HEADER,
        ],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    @app_instance.middleware("http")
    async def request_context(request: Request, call_next):
        """Expose the caller's access token and client id to the handlers."""
        authorization = request.headers.get("authorization", "")
        scheme, _, token = authorization.partition(" ")
        client_id = (
            request.headers.get(CLIENT_HEADER)
            or request.cookies.get(CLIENT_COOKIE)
            or uuid4().hex
        )
        with (
            use_access_token(token if scheme.lower() == "bearer" and token else None),
            use_audience(client_id),
        ):
            response = await call_next(request)
        if request.cookies.get(CLIENT_COOKIE) != client_id:
            response.set_cookie(CLIENT_COOKIE, client_id, httponly=True, samesite="lax")
        return response

    setup_di(app_instance, container or create_container())

    app_instance.include_router(health.router)
    app_instance.include_router(comments.router)
    app_instance.include_router(notifications.router)

    return app_instance
