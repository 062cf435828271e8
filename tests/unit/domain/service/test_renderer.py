"""Unit tests for the comment renderer and binder."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from guestbook.domain.service import CommentBinder, build_tree, paginate, render
from guestbook.domain.service.renderer import (
    AVATAR_COLORS,
    avatar_color,
    format_content,
    iter_views,
    relative_time,
)
from guestbook.domain.value import CommentAction, ThreadStatus
from tests.factories import NOW, make_record


def thread(*records):
    return build_tree(list(records))


class TestFormatContent:
    """Tests for escaping and the inline formatting whitelist."""

    def test_html_is_escaped(self):
        assert format_content("<script>alert(1)</script>") == (
            "&lt;script&gt;alert(1)&lt;/script&gt;"
        )

    def test_whitelisted_tokens(self):
        html = format_content("[b]bold[/b] and [i]it[/i] [code]x<y[/code]")

        assert html == "<strong>bold</strong> and <em>it</em> <code>x&lt;y</code>"

    def test_urls_become_links(self):
        html = format_content("see https://example.com")

        assert html == (
            'see <a href="https://example.com" target="_blank" rel="noopener">'
            "https://example.com</a>"
        )

    @pytest.mark.parametrize(
        ("content", "url"),
        [
            ("see http://a.com.", "http://a.com"),
            ("(http://a.com/x), ok", "http://a.com/x"),
            ('"http://a.com"', "http://a.com"),
            ("'http://a.com'", "http://a.com"),
            ("http://a.com/?q=1&x=2!", "http://a.com/?q=1&amp;x=2"),
        ],
    )
    def test_link_excludes_quotes_and_trailing_punctuation(self, content, url):
        html = format_content(content)

        assert f'<a href="{url}" target="_blank" rel="noopener">{url}</a>' in html

    def test_url_cannot_break_out_of_attribute(self):
        html = format_content('https://x.test/"onmouseover="alert(1)')

        assert 'onmouseover="' not in html
        assert "&quot;" in html

    def test_newlines_become_breaks(self):
        assert format_content("one\ntwo\r\nthree") == "one<br>two<br>three"

    def test_unknown_tags_stay_escaped(self):
        assert format_content("[u]x[/u] <u>y</u>") == "[u]x[/u] &lt;u&gt;y&lt;/u&gt;"


class TestRelativeTime:
    """Tests for relative time labels."""

    @pytest.mark.parametrize(
        "delta,label",
        [
            (timedelta(seconds=30), "just now"),
            (timedelta(minutes=1), "1 minute ago"),
            (timedelta(minutes=45), "45 minutes ago"),
            (timedelta(hours=1), "1 hour ago"),
            (timedelta(hours=23), "23 hours ago"),
            (timedelta(days=1), "1 day ago"),
            (timedelta(days=6), "6 days ago"),
            (timedelta(days=7), "1 week ago"),
            (timedelta(days=29), "4 weeks ago"),
        ],
    )
    def test_buckets(self, delta, label):
        assert relative_time(NOW - delta, NOW) == label

    def test_older_than_a_month_shows_date(self):
        assert relative_time(NOW - timedelta(days=45), NOW) == "Apr 17, 2025"


class TestAvatarColor:
    def test_stable_and_from_palette(self):
        assert avatar_color("amy") == avatar_color("amy")
        assert avatar_color("amy") in AVATAR_COLORS


class TestRender:
    """Tests for render."""

    def test_render_is_idempotent(self):
        """Rendering the same tree twice gives equal views."""
        tree = thread(
            make_record(1, minutes_ago=90),
            make_record(2, parent_id=1, minutes_ago=60),
            make_record(3, minutes_ago=1),
        )

        first = render(tree, authorized=True, now=NOW)
        second = render(tree, authorized=True, now=NOW)

        assert first == second

    def test_nested_structure_and_counts(self):
        tree = thread(
            make_record(1, minutes_ago=90),
            make_record(2, parent_id=1, minutes_ago=60),
            make_record(3, parent_id=2, minutes_ago=30),
        )

        view = render(tree, authorized=False, now=NOW)

        root = view.comments[0]
        assert view.total == 3
        assert root.reply_count == 2
        assert root.replies[0].depth == 1
        assert root.replies[0].replies[0].comment_id == "3"
        assert root.time_label == "1 hour ago"

    def test_delete_action_only_when_authorized(self):
        tree = thread(make_record(1))

        visitor = render(tree, authorized=False, now=NOW)
        admin = render(tree, authorized=True, now=NOW)

        assert [a.action for a in visitor.comments[0].actions] == [
            CommentAction.REPLY,
            CommentAction.LIKE,
        ]
        assert CommentAction.DELETE in [a.action for a in admin.comments[0].actions]

    def test_in_flight_action_is_disabled(self):
        tree = thread(make_record(1), make_record(2))

        view = render(tree, authorized=True, now=NOW, in_flight={(CommentAction.LIKE, "1")})

        actions = {
            (comment.comment_id, a.action): a.enabled
            for comment in view.comments
            for a in comment.actions
        }
        assert actions[("1", CommentAction.LIKE)] is False
        assert actions[("2", CommentAction.LIKE)] is True
        assert actions[("1", CommentAction.REPLY)] is True

    def test_author_and_device_are_escaped(self):
        tree = thread(make_record(1, author="<b>eve</b>", device=""))

        comment = render(tree, authorized=False, now=NOW).comments[0]

        assert comment.author == "&lt;b&gt;eve&lt;/b&gt;"
        assert comment.author_initial == "&lt;"
        assert comment.device == "Unknown device"

    def test_admin_badge(self):
        comment = render(thread(make_record(1, is_admin=True)), False, now=NOW).comments[0]

        assert comment.is_admin is True

    def test_empty_thread_is_empty_not_failed(self):
        view = render([], authorized=False, now=NOW)

        assert view.status == ThreadStatus.EMPTY
        assert view.message

    def test_failed_status_is_kept(self):
        view = render([], authorized=False, now=NOW, status=ThreadStatus.FAILED)

        assert view.status == ThreadStatus.FAILED
        assert view.message == "Comments could not be loaded"

    def test_iter_views_display_order(self):
        tree = thread(
            make_record(1, minutes_ago=90),
            make_record(2, parent_id=1, minutes_ago=60),
            make_record(3, minutes_ago=1),
        )

        ids = [c.comment_id for c in iter_views(render(tree, False, now=NOW).comments)]

        assert ids == ["3", "1", "2"]


class TestPaginate:
    """Tests for paginate."""

    def make_view(self, roots):
        return render(
            thread(*(make_record(i, minutes_ago=i) for i in range(1, roots + 1))),
            authorized=False,
            now=NOW,
        )

    def test_slices_root_threads(self):
        page = paginate(self.make_view(25), page=3, per_page=10)

        assert page.total_pages == 3
        assert len(page.comments) == 5
        assert page.total == 25

    @pytest.mark.parametrize("requested,expected", [(0, 1), (-2, 1), (99, 3)])
    def test_out_of_range_page_is_clamped(self, requested, expected):
        page = paginate(self.make_view(25), page=requested, per_page=10)

        assert page.page == expected

    def test_empty_view_has_one_page(self):
        page = paginate(self.make_view(0), page=1, per_page=10)

        assert page.total_pages == 1
        assert page.comments == []


class TestCommentBinder:
    """Tests for CommentBinder."""

    def test_binds_every_enabled_action(self):
        tree = thread(make_record(1, minutes_ago=2), make_record(2, parent_id=1, minutes_ago=1))
        view = render(tree, authorized=True, now=NOW, in_flight={(CommentAction.LIKE, "2")})

        bindings = CommentBinder(AsyncMock()).bind(view)

        assert set(bindings) == {
            (CommentAction.REPLY, "1"),
            (CommentAction.LIKE, "1"),
            (CommentAction.DELETE, "1"),
            (CommentAction.REPLY, "2"),
            (CommentAction.DELETE, "2"),
        }

    def test_no_delete_bindings_for_visitors(self):
        view = render(thread(make_record(1)), authorized=False, now=NOW)

        bindings = CommentBinder(AsyncMock()).bind(view)

        assert (CommentAction.DELETE, "1") not in bindings

    @pytest.mark.asyncio
    async def test_handlers_call_engine(self):
        engine = AsyncMock()
        view = render(thread(make_record(1)), authorized=True, now=NOW)
        bindings = CommentBinder(engine).bind(view)

        await bindings[(CommentAction.REPLY, "1")]("text", "amy")
        await bindings[(CommentAction.LIKE, "1")]()
        await bindings[(CommentAction.DELETE, "1")]()

        engine.submit_comment.assert_awaited_once_with("text", "amy", parent_id="1")
        engine.like.assert_awaited_once_with("1")
        engine.delete.assert_awaited_once_with("1")
