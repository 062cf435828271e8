"""Unit tests for the flat store adapter."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from guestbook.domain.error import FetchError
from guestbook.domain.repository import StoreResponse
from guestbook.domain.service import FlatStoreAdapter, normalize_record, normalize_records
from guestbook.persistence.inmemory import InMemoryCommentStore
from tests.factories import make_row
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestNormalizeRecord:
    """Tests for normalizing single rows."""

    def test_snake_case_row(self):
        """A current-table row maps field for field."""
        record = normalize_record(make_row(3, parent_id=1, likes=4, is_admin=True))

        assert record.id == "3"
        assert record.parent_id == "1"
        assert record.likes == 4
        assert record.is_admin is True
        assert record.created_at.tzinfo is not None

    def test_camel_case_aliases(self):
        """Legacy camelCase names normalize to the same record."""
        record = normalize_record(
            {
                "id": 5,
                "parentId": "2",
                "author": "amy",
                "content": "hi",
                "createdAt": "2025-05-01T10:00:00Z",
                "isAdmin": True,
            }
        )

        assert record.parent_id == "2"
        assert record.created_at == datetime(2025, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert record.is_admin is True

    def test_timestamp_alias(self):
        record = normalize_record(
            {"id": 1, "author": "a", "content": "b", "timestamp": "2025-05-01T10:00:00+00:00"}
        )

        assert record.created_at == datetime(2025, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_defaults_for_missing_fields(self):
        """Missing optional fields get their documented defaults."""
        record = normalize_record({"id": 9, "created_at": "2025-05-01T10:00:00Z"})

        assert record.author == "Anonymous"
        assert record.content == ""
        assert record.likes == 0
        assert record.device == ""
        assert record.is_admin is False
        assert record.parent_id is None

    def test_null_and_negative_likes_become_zero(self):
        assert normalize_record(make_row(1, likes=None)).likes == 0
        assert normalize_record(make_row(1, likes=-3)).likes == 0

    def test_missing_id_raises(self):
        with pytest.raises(ValueError):
            normalize_record({"author": "a", "created_at": "2025-05-01T10:00:00Z"})

    def test_missing_timestamp_raises(self):
        with pytest.raises(ValueError):
            normalize_record({"id": 1, "author": "a"})


class TestNormalizeRecords:
    """Tests for normalizing batches."""

    def test_skips_malformed_rows(self):
        """Rows without id or timestamp are dropped, the rest kept."""
        rows = [
            make_row(1),
            {"author": "no id", "created_at": "2025-05-01T10:00:00Z"},
            {"id": 3, "author": "no time"},
            "not a row",
            make_row(4),
        ]

        records = normalize_records(rows)

        assert [record.id for record in records] == ["1", "4"]

    def test_flattens_nested_replies(self):
        """Legacy nested replies become flat records pointing at their container."""
        rows = [
            {
                "id": "a",
                "author": "root",
                "content": "top",
                "timestamp": "2025-05-01T10:00:00Z",
                "replies": [
                    {
                        "id": "b",
                        "author": "r1",
                        "content": "reply",
                        "timestamp": "2025-05-01T11:00:00Z",
                        "replies": [
                            {
                                "id": "c",
                                "author": "r2",
                                "content": "deeper",
                                "timestamp": "2025-05-01T12:00:00Z",
                            }
                        ],
                    }
                ],
            }
        ]

        records = normalize_records(rows)

        assert [(r.id, r.parent_id) for r in records] == [
            ("a", None),
            ("b", "a"),
            ("c", "b"),
        ]


class TestFlatStoreAdapter:
    """Tests for FlatStoreAdapter.load."""

    @pytest.mark.asyncio
    async def test_load_returns_records(self, unit_env):
        """Rows from the store come back as canonical records."""
        # Arrange
        store = await unit_env.get(InMemoryCommentStore)
        store.seed(make_row(1, minutes_ago=5))
        store.seed(make_row(2, parent_id=1, minutes_ago=1))
        adapter = await unit_env.get(FlatStoreAdapter)

        # Act
        result = await adapter.load()

        # Assert
        assert result.ok
        assert {record.id for record in result.records} == {"1", "2"}

    @pytest.mark.asyncio
    async def test_load_failure_is_reported_not_raised(self, unit_env):
        """A failed fetch returns a FetchError instead of raising."""
        store = await unit_env.get(InMemoryCommentStore)
        store.failing.add("fetch")
        adapter = await unit_env.get(FlatStoreAdapter)

        result = await adapter.load()

        assert not result.ok
        assert isinstance(result.error, FetchError)
        assert result.records == []

    @pytest.mark.asyncio
    async def test_store_exception_is_reported(self):
        store = AsyncMock()
        store.fetch_comments.side_effect = ConnectionError("network down")

        result = await FlatStoreAdapter(store).load()

        assert not result.ok
        assert "network down" in str(result.error)

    @pytest.mark.asyncio
    async def test_non_list_payload_is_a_failure(self):
        store = AsyncMock()
        store.fetch_comments.return_value = StoreResponse.ok({"unexpected": True})

        result = await FlatStoreAdapter(store).load()

        assert not result.ok

    @pytest.mark.asyncio
    async def test_fetch_limit_is_passed_to_store(self):
        store = AsyncMock()
        store.fetch_comments.return_value = StoreResponse.ok([])

        await FlatStoreAdapter(store, fetch_limit=25).load()

        store.fetch_comments.assert_awaited_once_with(limit=25)
