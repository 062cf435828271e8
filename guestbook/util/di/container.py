"""Dependency injection container."""

from collections.abc import Collection

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from guestbook.util.di import Component, build_providers


def create_container(mocked: Collection[Component] = ()) -> AsyncContainer:
    """Build the application container.

    Args:
        mocked: Components replaced by their mock implementation (tests only)

    Returns:
        Container that can also back the FastAPI app
    """
    return make_async_container(*build_providers(mocked), FastapiProvider())


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    """Attach the container; it is then reachable as ``app.state.dishka_container``."""
    setup_dishka(container, app)
