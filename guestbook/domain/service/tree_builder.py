"""Comment tree builder.

Turns the flat, parent-referencing list of records into a depth-bounded tree.
The builder is total: malformed relationships (unknown parents, cycles, chains
deeper than the limit) degrade to root placement instead of raising.
"""

from collections.abc import Iterable, Iterator, Sequence

import logfire

from guestbook.domain.model.comment import CommentNode, CommentRecord
from guestbook.domain.value import CommentId

DEFAULT_MAX_DEPTH = 5


def build_tree(
    records: Sequence[CommentRecord], max_depth: int = DEFAULT_MAX_DEPTH
) -> list[CommentNode]:
    """Build the comment tree from the flat list.

    Algorithm:
    1. Index records by canonical id (last seen wins for duplicates)
    2. Resolve each record's parent chain; missing parents make roots
    3. depth = effective parent depth + 1, or root (depth 0) past max_depth
    4. Sort every sibling list by created_at descending

    Args:
        records: Flat list of comment records
        max_depth: Deepest allowed nesting level (roots are 0)

    Returns:
        Root nodes with children nested inside
    """
    index: dict[CommentId, CommentRecord] = {}
    for record in records:
        index[record.id] = record

    depths: dict[CommentId, int] = {}
    parents: dict[CommentId, CommentId | None] = {}

    for record_id in index:
        if record_id not in depths:
            _resolve(record_id, index, depths, parents, max_depth)

    nodes = {
        record_id: CommentNode(record=record, depth=depths[record_id])
        for record_id, record in index.items()
    }
    roots: list[CommentNode] = []
    for record_id, node in nodes.items():
        parent_id = parents[record_id]
        if parent_id is None:
            roots.append(node)
        else:
            nodes[parent_id].children.append(node)

    _sort_siblings(roots)
    return roots


def _resolve(
    record_id: CommentId,
    index: dict[CommentId, CommentRecord],
    depths: dict[CommentId, int],
    parents: dict[CommentId, CommentId | None],
    max_depth: int,
) -> None:
    """Place a record and every unresolved ancestor above it.

    Walks up the parent chain until it reaches a placed record, a root or an
    unknown parent, then assigns depths on the way back down. Iterative so a
    long chain cannot hit the recursion limit.
    """
    chain: list[CommentId] = []
    on_chain: set[CommentId] = set()
    current = record_id

    while current not in depths:
        if current in on_chain:
            start = chain.index(current)
            cycle = chain[start:]
            logfire.warn(
                "Cyclic parent references, placing comments at top level",
                comment_ids=list(cycle),
            )
            for member in cycle:
                depths[member] = 0
                parents[member] = None
            del chain[start:]
            break

        parent_id = index[current].parent_id
        if parent_id is None or parent_id not in index:
            if parent_id is not None:
                logfire.debug(
                    "Orphaned comment placed at top level",
                    comment_id=current,
                    parent_id=parent_id,
                )
            depths[current] = 0
            parents[current] = None
            break

        chain.append(current)
        on_chain.add(current)
        current = parent_id

    for node_id in reversed(chain):
        parent_id = index[node_id].parent_id
        depth = depths[parent_id] + 1
        if depth > max_depth:
            depths[node_id] = 0
            parents[node_id] = None
        else:
            depths[node_id] = depth
            parents[node_id] = parent_id


def _sort_siblings(nodes: list[CommentNode]) -> None:
    """Order siblings newest first, recursively.

    Ties on created_at fall back to id so the result never depends on the
    order records arrived in.
    """
    pending = [nodes]
    while pending:
        siblings = pending.pop()
        siblings.sort(key=lambda node: (node.created_at, node.id), reverse=True)
        pending.extend(node.children for node in siblings if node.children)


def iter_nodes(roots: Iterable[CommentNode]) -> Iterator[CommentNode]:
    """Walk the tree in display order (pre-order)."""
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_node(roots: Iterable[CommentNode], comment_id: CommentId) -> CommentNode | None:
    """Find a node anywhere in the tree."""
    for node in iter_nodes(roots):
        if node.id == comment_id:
            return node
    return None


def count_nodes(roots: Iterable[CommentNode]) -> int:
    """Count every node in the tree, roots included."""
    return sum(1 for _ in iter_nodes(roots))


def collect_descendant_ids(
    records: Iterable[CommentRecord], comment_id: CommentId
) -> list[CommentId]:
    """Ids of a comment and every record below it.

    Follows the stored ``parent_id`` links of the flat list, not the placed
    tree: a reply shown at the top level because of the depth limit still
    belongs to its ancestor and goes with it in the store's cascade.
    """
    index = {record.id: record for record in records}
    children: dict[CommentId, list[CommentId]] = {}
    for record in index.values():
        if record.parent_id is not None:
            children.setdefault(record.parent_id, []).append(record.id)

    collected = [comment_id]
    seen = {comment_id}
    pending = [comment_id]
    while pending:
        for child_id in children.get(pending.pop(), []):
            if child_id not in seen:
                seen.add(child_id)
                collected.append(child_id)
                pending.append(child_id)
    return collected
