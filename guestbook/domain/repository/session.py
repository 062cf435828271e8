"""Session provider interface."""

from abc import ABC, abstractmethod

from guestbook.domain.value import Session


class SessionProvider(ABC):
    """Source of the current auth session and its role."""

    @abstractmethod
    async def get_session(self) -> Session:
        """Read the current session.

        Returns:
            Session snapshot; an anonymous session when nobody is signed in
        """
        pass
