"""Local flat-list cache.

A non-authoritative JSON snapshot of the last successfully loaded flat list.
It is overwritten after every successful remote load and only read when a
load fails while nothing is held in memory.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import logfire
from pydantic import BaseModel

from guestbook.domain.model.comment import CommentRecord
from guestbook.domain.service.store_adapter import normalize_records


class CacheSnapshot(BaseModel):
    """On-disk cache layout."""

    saved_at: datetime
    comments: list[dict]


class FlatListCache:
    """JSON file cache of the flat list."""

    def __init__(self, path: Path, ttl_seconds: int = 300) -> None:
        """Initialize cache.

        Args:
            path: Cache file location
            ttl_seconds: Snapshots older than this are ignored
        """
        self.path = path
        self.ttl = timedelta(seconds=ttl_seconds)

    def save(self, records: list[CommentRecord]) -> None:
        """Replace the snapshot with the given records."""
        snapshot = CacheSnapshot(
            saved_at=datetime.now(timezone.utc),
            comments=[record.model_dump(mode="json") for record in records],
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(snapshot.model_dump_json(), encoding="utf-8")
        except OSError as e:
            logfire.warn("Comment cache write failed", path=str(self.path), error=str(e))
            return
        logfire.debug("Comment cache saved", path=str(self.path), count=len(records))

    def load(self, now: datetime | None = None) -> list[CommentRecord] | None:
        """Read the snapshot if it exists and is fresh.

        Returns:
            Cached records, or None when there is no usable snapshot
        """
        if not self.path.exists():
            return None
        try:
            snapshot = CacheSnapshot.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logfire.warn("Comment cache unreadable", path=str(self.path), error=str(e))
            return None

        now = now or datetime.now(timezone.utc)
        saved_at = snapshot.saved_at
        if saved_at.tzinfo is None:
            saved_at = saved_at.replace(tzinfo=timezone.utc)
        if now - saved_at > self.ttl:
            logfire.info("Comment cache expired", saved_at=saved_at.isoformat())
            return None

        return normalize_records(snapshot.comments)
