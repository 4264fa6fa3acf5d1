"""
Request Session
===============

Explicit identity object handed to whatever needs to know who is acting.

Lifecycle::

    anonymous -> authenticating -> authenticated(user, role) -> signed_out
                       |                                          |
                       +--> anonymous (failed)    authenticating <+
"""

from enum import Enum
from typing import Optional

from mantra.config import STATUS_MANAGER_ROLES, UserRole
from mantra.core import AuthenticationException, SessionStateException
from mantra.tickets.domain.entities import TicketSnapshot


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    SIGNED_OUT = "signed_out"


class UserSession:
    """Identity of the caller for a single request."""

    _TRANSITIONS: dict[SessionState, set[SessionState]] = {
        SessionState.ANONYMOUS: {SessionState.AUTHENTICATING},
        SessionState.AUTHENTICATING: {SessionState.AUTHENTICATED, SessionState.ANONYMOUS},
        SessionState.AUTHENTICATED: {SessionState.SIGNED_OUT},
        SessionState.SIGNED_OUT: {SessionState.AUTHENTICATING},
    }

    def __init__(self) -> None:
        self._state = SessionState.ANONYMOUS
        self._user_id: Optional[str] = None
        self._role: Optional[UserRole] = None

    @classmethod
    def from_identity(cls, user_id: Optional[str], role: Optional[str]) -> "UserSession":
        """
        Build a session from identity asserted by the platform gateway.

        A missing user id leaves the session anonymous. Unrecognised roles
        get the least privileged role.
        """
        session = cls()
        if not user_id:
            return session
        session.begin_authentication()
        session.authenticate(user_id, parse_role(role))
        return session

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def role(self) -> Optional[UserRole]:
        return self._role

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED

    def _move(self, target: SessionState) -> None:
        if target not in self._TRANSITIONS[self._state]:
            raise SessionStateException(self._state.value, target.value)
        self._state = target

    def begin_authentication(self) -> None:
        self._move(SessionState.AUTHENTICATING)

    def authenticate(self, user_id: str, role: UserRole) -> None:
        self._move(SessionState.AUTHENTICATED)
        self._user_id = user_id
        self._role = role

    def fail_authentication(self) -> None:
        self._move(SessionState.ANONYMOUS)

    def sign_out(self) -> None:
        self._move(SessionState.SIGNED_OUT)
        self._user_id = None
        self._role = None

    def require_user(self) -> str:
        """Return the acting user's id, or raise if nobody is signed in."""
        if not self.is_authenticated or self._user_id is None:
            raise AuthenticationException("Authentication required")
        return self._user_id

    def __repr__(self) -> str:
        return f"UserSession(state={self._state.value!r}, user_id={self._user_id!r}, role={self._role!r})"


def parse_role(value: Optional[str]) -> UserRole:
    try:
        return UserRole((value or "").strip().lower())
    except ValueError:
        return UserRole.USER


def can_update_status(session: UserSession, ticket: TicketSnapshot) -> bool:
    """
    Admins and leads may change any ticket; everyone else only tickets they
    created or are assigned to.
    """
    if not session.is_authenticated or session.role is None:
        return False
    if session.role in STATUS_MANAGER_ROLES:
        return True
    return session.user_id in (ticket.assigned_to, ticket.created_by)


def can_reassign(session: UserSession) -> bool:
    return session.is_authenticated and session.role is not None


def can_toggle_l3(session: UserSession) -> bool:
    return session.is_authenticated and session.role is not None
