"""Domain services."""

from .access_gate import AccessGate
from .comment_thread import CommentThread
from .mutation_engine import MutationEngine, SubmitResult
from .notifier import (
    LOCAL_AUDIENCE,
    Notice,
    Notifier,
    ThreadChanged,
    ThreadListener,
    current_audience,
    use_audience,
)
from .renderer import CommentBinder, paginate, render
from .store_adapter import FlatStoreAdapter, LoadResult, normalize_record, normalize_records
from .tree_builder import (
    build_tree,
    collect_descendant_ids,
    count_nodes,
    find_node,
    iter_nodes,
)

__all__ = [
    "LOCAL_AUDIENCE",
    "AccessGate",
    "CommentBinder",
    "CommentThread",
    "FlatStoreAdapter",
    "LoadResult",
    "MutationEngine",
    "Notice",
    "Notifier",
    "SubmitResult",
    "ThreadChanged",
    "ThreadListener",
    "build_tree",
    "collect_descendant_ids",
    "current_audience",
    "count_nodes",
    "find_node",
    "iter_nodes",
    "normalize_record",
    "normalize_records",
    "paginate",
    "render",
    "use_audience",
]
