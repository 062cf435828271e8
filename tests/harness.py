"""Test harness.

Every fixture built here gets its own container, so the APP-scoped thread
state, notifier and in-memory store never leak between tests.
"""

import pytest_asyncio

from guestbook.util.di import Component
from tests.di import build_test_container


def create_env_fixture(unmock: set[Component] | None = None):
    """Create a fixture yielding a request container.

    Args:
        unmock: Components to use real implementations for

    Usage:
        unit_env = create_env_fixture()

        @pytest.mark.asyncio
        async def test_delete(unit_env):
            service = await unit_env.get(CommentTreeService)
            store = await unit_env.get(InMemoryCommentStore)
    """

    @pytest_asyncio.fixture
    async def _environment():
        container = build_test_container(unmock=unmock)
        try:
            async with container() as request_container:
                yield request_container
        finally:
            await container.close()

    return _environment
