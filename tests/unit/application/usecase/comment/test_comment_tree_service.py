"""Unit tests for CommentTreeService."""

import pytest

from guestbook.application.usecase.comment import CommentTreeService, SubmitCommentRequest
from guestbook.domain.error import ParentNotFoundError, PermissionDeniedError
from guestbook.domain.service import MutationEngine, ThreadChanged, use_audience
from guestbook.domain.value import CommentAction, NoticeLevel, ThreadStatus
from guestbook.persistence.cache import FlatListCache
from guestbook.persistence.inmemory import InMemoryCommentStore, InMemorySessionProvider
from tests.factories import NOW, make_record, make_row
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


async def seeded(unit_env, *rows) -> tuple[CommentTreeService, InMemoryCommentStore]:
    """Seed the store and load the service."""
    store = await unit_env.get(InMemoryCommentStore)
    for row in rows:
        store.seed(row)
    service = await unit_env.get(CommentTreeService)
    service.clock = lambda: NOW
    await service.initialize()
    return service, store


def levels(service: CommentTreeService) -> list[tuple[NoticeLevel, str]]:
    return [(notice.level, notice.message) for notice in service.notices()]


class TestLoading:
    """Loading, failure and the local cache fallback."""

    @pytest.mark.asyncio
    async def test_initialize_renders_tree(self, unit_env):
        service, _ = await seeded(unit_env, make_row(1), make_row(2, parent_id=1))

        page = await service.view()

        assert page.status == ThreadStatus.READY
        assert page.total == 2
        assert [c.comment_id for c in page.comments] == ["1"]
        assert [r.comment_id for r in page.comments[0].replies] == ["2"]

    @pytest.mark.asyncio
    async def test_empty_store_is_empty_not_failed(self, unit_env):
        service, _ = await seeded(unit_env)

        page = await service.view()

        assert page.status == ThreadStatus.EMPTY
        assert page.message == "No comments yet. Be the first to leave one!"
        assert levels(service) == []

    @pytest.mark.asyncio
    async def test_first_load_failure_is_failed(self, unit_env):
        store = await unit_env.get(InMemoryCommentStore)
        store.failing.add("fetch")
        service = await unit_env.get(CommentTreeService)

        await service.initialize()
        page = await service.view()

        assert page.status == ThreadStatus.FAILED
        assert page.comments == []
        assert levels(service) == [(NoticeLevel.ERROR, "Comments could not be loaded")]

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_last_good_data(self, unit_env):
        service, store = await seeded(unit_env, make_row(1))
        store.failing.add("fetch")

        await service.refresh()
        page = await service.view()

        assert page.status == ThreadStatus.STALE
        assert [c.comment_id for c in page.comments] == ["1"]

    @pytest.mark.asyncio
    async def test_failed_load_falls_back_to_cache(self, unit_env, tmp_path):
        cache = FlatListCache(tmp_path / "comments.json")
        cache.save([make_record(1), make_record(2, parent_id=1)])
        store = await unit_env.get(InMemoryCommentStore)
        store.failing.add("fetch")
        service = await unit_env.get(CommentTreeService)
        service.cache = cache

        await service.initialize()
        page = await service.view()

        assert page.status == ThreadStatus.STALE
        assert page.total == 2
        assert service.thread.last_error == "fetch unavailable"
        assert [level for level, _ in levels(service)] == [NoticeLevel.WARNING]

    @pytest.mark.asyncio
    async def test_successful_load_writes_cache(self, unit_env, tmp_path):
        store = await unit_env.get(InMemoryCommentStore)
        store.seed(make_row(1))
        service = await unit_env.get(CommentTreeService)
        service.cache = FlatListCache(tmp_path / "comments.json")

        await service.initialize()

        assert [record.id for record in service.cache.load()] == ["1"]

    @pytest.mark.asyncio
    async def test_pagination_slices_root_threads(self, unit_env):
        rows = [make_row(i, minutes_ago=i) for i in range(1, 13)]
        service, _ = await seeded(unit_env, *rows)

        page = await service.view(page=2)

        assert page.page == 2
        assert page.total_pages == 2
        assert len(page.comments) == 2
        assert page.total == 12

    @pytest.mark.asyncio
    async def test_delete_affordance_follows_session(self, unit_env):
        service, _ = await seeded(unit_env, make_row(1))
        sessions = await unit_env.get(InMemorySessionProvider)

        anonymous = await service.view()
        sessions.sign_in_admin()
        admin = await service.view()

        assert CommentAction.DELETE not in [b.action for b in anonymous.comments[0].actions]
        assert CommentAction.DELETE in [b.action for b in admin.comments[0].actions]
        assert admin.authorized


class TestActions:
    """Submit, like and delete through the service."""

    @pytest.mark.asyncio
    async def test_submit_top_level(self, unit_env):
        service, store = await seeded(unit_env)

        response = await service.submit_top_level(
            SubmitCommentRequest(author="amy", content="Lovely site", device="Desktop · Firefox")
        )

        assert response.parent_id is None
        assert not response.flattened
        assert store.get(response.comment_id)["device"] == "Desktop · Firefox"
        assert levels(service) == [(NoticeLevel.SUCCESS, "Comment posted")]
        assert service.thread.total == 1

    @pytest.mark.asyncio
    async def test_reply_below_max_depth_is_flattened(self, unit_env):
        rows = [make_row(1)] + [make_row(i, parent_id=i - 1) for i in range(2, 7)]
        service, _ = await seeded(unit_env, *rows)

        response = await service.submit_reply(
            6, SubmitCommentRequest(author="amy", content="deep")
        )

        assert response.flattened
        assert response.parent_id == "6"
        messages = levels(service)
        assert messages[0][0] == NoticeLevel.INFO
        assert messages[-1] == (NoticeLevel.SUCCESS, "Comment posted")
        page = await service.view()
        assert response.comment_id in [c.comment_id for c in page.comments]

    @pytest.mark.asyncio
    async def test_reply_to_unknown_parent_warns(self, unit_env):
        service, store = await seeded(unit_env, make_row(1))

        with pytest.raises(ParentNotFoundError):
            await service.submit_reply("99", SubmitCommentRequest(author="amy", content="hi"))

        assert [level for level, _ in levels(service)] == [NoticeLevel.WARNING]
        assert all(name != "create" for name, _ in store.calls)

    @pytest.mark.asyncio
    async def test_like_publishes_change(self, unit_env):
        service, store = await seeded(unit_env, make_row(1, likes=2))
        events: list[ThreadChanged] = []
        service.subscribe(events.append)

        response = await service.like("1")
        await (await unit_env.get(MutationEngine)).wait_for_background()

        assert response.likes == 3
        assert store.get("1")["likes"] == 3
        assert [event.reason for event in events] == ["comment_liked"]

    @pytest.mark.asyncio
    async def test_request_delete_counts_replies(self, unit_env):
        service, _ = await seeded(
            unit_env, make_row(1), make_row(2, parent_id=1), make_row(3, parent_id=2)
        )
        sessions = await unit_env.get(InMemorySessionProvider)

        anonymous = await service.request_delete(1)
        sessions.sign_in_admin()
        admin = await service.request_delete(1)

        assert anonymous.reply_count == 2
        assert anonymous.author == "user1"
        assert not anonymous.authorized
        assert admin.authorized

    @pytest.mark.asyncio
    async def test_request_delete_counts_replies_shown_at_top_level(self, unit_env):
        rows = [make_row(1)] + [make_row(i, parent_id=i - 1) for i in range(2, 8)]
        service, _ = await seeded(unit_env, *rows)
        assert service.thread.find_node("7").depth == 0

        confirmation = await service.request_delete(1)

        assert confirmation.reply_count == 6

    @pytest.mark.asyncio
    async def test_anonymous_delete_is_denied(self, unit_env):
        service, store = await seeded(unit_env, make_row(1))

        with pytest.raises(PermissionDeniedError):
            await service.delete("1")

        assert store.get("1") is not None
        assert [level for level, _ in levels(service)] == [NoticeLevel.ERROR]

    @pytest.mark.asyncio
    async def test_denied_delete_notice_goes_to_the_visitor_who_tried(self, unit_env):
        service, _ = await seeded(unit_env, make_row(1))

        with use_audience("alice"), pytest.raises(PermissionDeniedError):
            await service.delete("1")

        with use_audience("bob"):
            assert service.notices() == []
        with use_audience("alice"):
            assert [level for level, _ in levels(service)] == [NoticeLevel.ERROR]

    @pytest.mark.asyncio
    async def test_admin_delete_removes_subtree(self, unit_env):
        service, store = await seeded(
            unit_env, make_row(1), make_row(2, parent_id=1), make_row(3, parent_id=2), make_row(4)
        )
        (await unit_env.get(InMemorySessionProvider)).sign_in_admin()

        response = await service.delete("1")

        assert response.removed == 3
        assert [row["id"] for row in store.rows()] == [4]
        assert levels(service) == [(NoticeLevel.SUCCESS, "Deleted 3 comments")]


class TestReporting:
    """Reply context, stats and export."""

    @pytest.mark.asyncio
    async def test_reply_context_truncates_preview(self, unit_env):
        service, _ = await seeded(unit_env, make_row(1, author="amy", content="x" * 150))

        context = service.reply_context("1")

        assert context.preview == "x" * 100 + "..."
        assert context.mention == "@amy "

    @pytest.mark.asyncio
    async def test_stats(self, unit_env):
        service, _ = await seeded(
            unit_env,
            make_row(1, is_admin=True),
            make_row(2, parent_id=1),
            make_row(3, minutes_ago=60 * 24 * 3),
        )

        stats = service.stats()

        assert stats.total == 3
        assert stats.today == 2
        assert stats.admin == 1

    @pytest.mark.asyncio
    async def test_export_requires_admin(self, unit_env):
        service, _ = await seeded(unit_env, make_row(1))

        with pytest.raises(PermissionDeniedError):
            await service.export()

    @pytest.mark.asyncio
    async def test_export_is_nested_and_keeps_email(self, unit_env):
        service, _ = await seeded(
            unit_env, make_row(1, email="amy@example.com"), make_row(2, parent_id=1)
        )
        (await unit_env.get(InMemorySessionProvider)).sign_in_admin()

        export = await service.export()

        assert export.total_comments == 2
        assert export.export_time == NOW
        assert export.comments[0].email == "amy@example.com"
        assert [reply.id for reply in export.comments[0].replies] == ["2"]
