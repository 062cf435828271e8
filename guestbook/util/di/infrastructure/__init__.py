"""Infrastructure providers.

Production implementations are imported here so that ``__subclasses__``
finds them; mock implementations live with the tests.
"""

from .supabase import ProdSupabaseProvider, SupabaseProvider

__all__ = [
    "ProdSupabaseProvider",
    "SupabaseProvider",
]
