"""Mock providers for testing."""

from .supabase import MockSupabaseProvider
from .container import build_test_container

__all__ = [
    "MockSupabaseProvider",
    "build_test_container",
]
