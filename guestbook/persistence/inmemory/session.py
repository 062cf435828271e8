"""In-memory session provider for testing."""

from guestbook.domain.repository import SessionProvider
from guestbook.domain.value import Role, Session, UserId


class InMemorySessionProvider(SessionProvider):
    """Session provider backed by a settable session."""

    def __init__(self, session: Session | None = None) -> None:
        self.session = session or Session.anonymous()
        self.lookups = 0

    def sign_in_admin(self, user_id: str = "admin-1") -> None:
        self.session = Session(signed_in=True, role=Role.ADMIN, user_id=UserId(user_id))

    def sign_in_user(self, user_id: str = "user-1") -> None:
        self.session = Session(signed_in=True, role=Role.USER, user_id=UserId(user_id))

    def sign_out(self) -> None:
        self.session = Session.anonymous()

    async def get_session(self) -> Session:
        self.lookups += 1
        return self.session
