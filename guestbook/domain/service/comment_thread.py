"""Comment thread state.

Owns the authoritative flat list and the tree derived from it. One instance
per application (injected, never a module global); only the mutation engine
and the load path write to it.
"""

from collections.abc import Iterable

import logfire

from guestbook.domain.model.comment import CommentNode, CommentRecord
from guestbook.domain.service.tree_builder import (
    build_tree,
    collect_descendant_ids,
    count_nodes,
    find_node,
)
from guestbook.domain.value import CommentId, ThreadStatus


class CommentThread:
    """Flat list plus derived tree.

    Every write replaces the tree with a fresh ``build_tree`` of the current
    flat list; the tree is never patched in place.
    """

    def __init__(self, max_depth: int) -> None:
        """Initialize an empty thread.

        Args:
            max_depth: Deepest allowed nesting level
        """
        self.max_depth = max_depth
        self.status = ThreadStatus.LOADING
        self.last_error: str | None = None
        self.version = 0
        self._records: list[CommentRecord] = []
        self._tree: list[CommentNode] = []
        self._has_good_data = False

    @property
    def records(self) -> tuple[CommentRecord, ...]:
        return tuple(self._records)

    @property
    def tree(self) -> list[CommentNode]:
        return self._tree

    @property
    def has_good_data(self) -> bool:
        """Whether a load has ever succeeded (or the cache stood in for one)."""
        return self._has_good_data

    @property
    def total(self) -> int:
        return count_nodes(self._tree)

    def replace_all(self, records: Iterable[CommentRecord], stale: bool = False) -> None:
        """Swap in a new flat list.

        Args:
            records: Loaded records
            stale: True when the records come from the local cache rather
                than a successful remote load
        """
        self._records = list(records)
        self._has_good_data = True
        self.status = ThreadStatus.STALE if stale else ThreadStatus.LOADING
        if not stale:
            self.last_error = None
        self._rebuild()

    def mark_failed(self, error: str) -> None:
        """Record a failed load, keeping whatever good data is held."""
        self.last_error = error
        self.status = ThreadStatus.STALE if self._has_good_data else ThreadStatus.FAILED
        logfire.warn(
            "Comment thread load failed",
            error=error,
            status=self.status.value,
            kept_records=len(self._records),
        )

    def append(self, record: CommentRecord) -> None:
        self._records.append(record)
        self._rebuild()

    def replace_record(self, record: CommentRecord) -> None:
        """Replace the record with the same id (used for like counts)."""
        self._records = [
            record if existing.id == record.id else existing
            for existing in self._records
        ]
        self._rebuild()

    def remove(self, ids: Iterable[CommentId]) -> int:
        """Remove records by id.

        Returns:
            Number of records removed from the flat list
        """
        doomed = set(ids)
        before = len(self._records)
        self._records = [r for r in self._records if r.id not in doomed]
        self._rebuild()
        return before - len(self._records)

    def find_record(self, comment_id: CommentId) -> CommentRecord | None:
        # Last one wins, matching the tree builder's duplicate handling
        for record in reversed(self._records):
            if record.id == comment_id:
                return record
        return None

    def find_node(self, comment_id: CommentId) -> CommentNode | None:
        return find_node(self._tree, comment_id)

    def cascade_ids(self, comment_id: CommentId) -> list[CommentId]:
        """Ids a delete of this comment removes, the comment itself first."""
        return collect_descendant_ids(self._records, comment_id)

    def _rebuild(self) -> None:
        self._tree = build_tree(self._records, self.max_depth)
        self.version += 1
        if self._has_good_data and self.status != ThreadStatus.STALE:
            self.status = ThreadStatus.READY if self._records else ThreadStatus.EMPTY
