"""Dependency injection for the guestbook.

Concrete providers are used as-is. A mockable component is declared by a
base provider carrying ``__mock_component__``; its production and mock
implementations subclass that base and are told apart by ``__is_mock__``.
"""

from collections.abc import Collection
from typing import Type

from guestbook.util.di.application import ProdApplicationProvider
from guestbook.util.di.base import Component, ProviderBase
from guestbook.util.di.core import ProdConfigProvider
from guestbook.util.di.domain import ProdDomainProvider
from guestbook.util.di.infrastructure import ProdSupabaseProvider, SupabaseProvider

PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    # Mockable: the remote store and auth API
    SupabaseProvider,
]


def mockable_components() -> set[Component]:
    """Components with at least one registered implementation."""
    return {
        base.__mock_component__
        for base in PROVIDERS
        if base.__mock_component__ is not None and base.__subclasses__()
    }


def get_provider(base: Type[ProviderBase], use_mock: bool = False) -> Type[ProviderBase]:
    """Pick the provider class to instantiate for an entry of PROVIDERS.

    Raises:
        ValueError: If the component has no implementation of the requested kind
    """
    if base.__mock_component__ is None:
        return base

    impl = next(
        (c for c in base.__subclasses__() if c.__is_mock__ == use_mock),
        None,
    )
    if impl is None:
        kind = "mock" if use_mock else "production"
        raise ValueError(f"No {kind} implementation for the {base.__mock_component__} component")
    return impl


def build_providers(mocked: Collection[Component] = ()) -> list[ProviderBase]:
    """Instantiate one provider per entry of PROVIDERS.

    Args:
        mocked: Components to take the mock implementation of
    """
    return [
        get_provider(base, use_mock=base.__mock_component__ in mocked)()
        for base in PROVIDERS
    ]


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "build_providers",
    "get_provider",
    "mockable_components",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "SupabaseProvider",
    "ProdSupabaseProvider",
]
