"""Identifiers for guestbook entities.

The remote store hands out bigint ids, older cached data used random strings.
Every id is canonicalized to one string form so ``7`` and ``"7"`` compare equal.
"""

from typing import Any, NewType
from uuid import UUID

CommentId = NewType("CommentId", str)
UserId = NewType("UserId", str)


def canonical_id(value: Any) -> CommentId:
    """Normalize a raw identifier to its canonical string form.

    Args:
        value: Identifier as received (int, str, UUID)

    Returns:
        Canonical comment id

    Raises:
        ValueError: If the value cannot identify a comment
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid comment id: {value!r}")
    if isinstance(value, int):
        return CommentId(str(value))
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Invalid comment id: {value!r}")
        return CommentId(str(int(value)))
    if isinstance(value, UUID):
        return CommentId(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Comment id must not be empty")
        # "007" and "7" are the same bigint row
        if text.isdigit():
            return CommentId(str(int(text)))
        return CommentId(text.lower() if _is_uuid(text) else text)
    raise ValueError(f"Invalid comment id type: {type(value).__name__}")


def optional_canonical_id(value: Any) -> CommentId | None:
    """Normalize a nullable parent reference.

    Empty strings and ``None`` mean "no parent".
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return canonical_id(value)


def _is_uuid(text: str) -> bool:
    try:
        UUID(text)
    except ValueError:
        return False
    return True
