"""Access gate for destructive comment operations."""

import logfire

from guestbook.domain.repository import SessionProvider
from guestbook.domain.value import Role, Session


class AccessGate:
    """Decides whether the current session may delete comments.

    The gate keeps only the latest session snapshot. It never caches a
    decision: callers refresh the session before each destructive action so
    revocation and expiry are seen promptly, and check the session that
    ``refresh`` returned since concurrent requests share the gate.
    """

    def __init__(self, session_provider: SessionProvider) -> None:
        """Initialize the gate with an anonymous session.

        Args:
            session_provider: Source of the externally-owned session
        """
        self.session_provider = session_provider
        self._session = Session.anonymous()

    @property
    def session(self) -> Session:
        return self._session

    async def refresh(self) -> Session:
        """Re-read the session from the auth API.

        A failing lookup leaves the visitor anonymous rather than trusting
        the previous snapshot.

        Returns:
            The new session snapshot
        """
        with logfire.span("access_gate.refresh"):
            try:
                self._session = await self.session_provider.get_session()
            except Exception as e:
                logfire.warn("Session lookup failed, treating as anonymous", error=str(e))
                self._session = Session.anonymous()
            logfire.info(
                "Session refreshed",
                signed_in=self._session.signed_in,
                role=self._session.role.value,
            )
            return self._session

    def is_admin(self, session: Session | None = None) -> bool:
        """Whether a session is a signed-in admin.

        Args:
            session: Session to check; the latest snapshot when omitted
        """
        session = session or self._session
        return session.signed_in and session.role == Role.ADMIN

    def can_delete(self, session: Session | None = None) -> bool:
        """Whether a session may delete comments."""
        return self.is_admin(session)
