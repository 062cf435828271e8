"""Supabase adapter."""

from .client import SupabaseEndpoint, current_access_token, use_access_token
from .comment_store import SupabaseCommentStore
from .session import SupabaseSessionProvider

__all__ = [
    "SupabaseEndpoint",
    "SupabaseCommentStore",
    "SupabaseSessionProvider",
    "current_access_token",
    "use_access_token",
]
