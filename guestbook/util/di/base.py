"""Provider base class."""

from typing import ClassVar, Literal

from dishka import Provider

# Components with a swappable mock implementation
Component = Literal["supabase"]


class ProviderBase(Provider):
    """Base for the guestbook's dishka providers.

    Attributes:
        __mock_component__: Set on the base of a mockable component, None otherwise
        __is_mock__: True on the test double of a mockable component
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
