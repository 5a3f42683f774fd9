"""
auth/flow.py -- Session-backed login, status, and logout.

Per-session state machine:

    Anonymous --login--> Authenticated --logout--> (destroyed)
                              |
                              +--expiry--> (absent)

The session stores only the user id under data["user"] (the durable
identity token). Every status() call hydrates it back into a full
UserRecord from the UserStore, so a renamed user is seen immediately and a
deleted user stops being authenticated on the next request.

Session ids are passed in explicitly; nothing here reads request objects.
Callers get a LoginResult, a PublicUser, or None -- never a raw exception
other than the AppError subclasses documented on each method.

Layer rule: no imports from api/ or cart/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from auth.credentials import verify_credentials
from auth.models import PublicUser, UserRecord
from auth.store import UserStore
from core.errors import NotFound
from sessions.models import CART_KEY, USER_KEY
from sessions.store import SessionStore

logger = logging.getLogger("shopsession.auth.flow")


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful login.

    created is True when a new session id was allocated, i.e. the caller
    must (re)issue the session cookie.
    """

    session_id: str
    user: PublicUser
    created: bool


class AuthFlow:
    def __init__(self, users: UserStore, sessions: SessionStore) -> None:
        self.users = users
        self.sessions = sessions

    def login(self, session_id: str | None, name: str, password: str) -> LoginResult:
        """Verify credentials and bind the user to a session.

        A live session presented by the caller is reused when it is anonymous
        or already belongs to this user, so a client keeps its session id
        across login. A session bound to a different user is destroyed and
        replaced -- its cart must not carry over to another identity.

        Raises InvalidCredentials; on failure no session is created or changed.
        """
        user = verify_credentials(self.users, name, password)

        with self.sessions.locked(session_id) as session:
            if session is not None and session.data.get(USER_KEY) in (None, user.id):
                session.data[USER_KEY] = user.id
                logger.info("login ok user_id=%d (session reused)", user.id)
                return LoginResult(session_id=session.id, user=user.public(), created=False)

        if session_id and self.sessions.destroy(session_id):
            logger.info("login replaced a session bound to another user")

        new_id = self.sessions.create()
        with self.sessions.locked(new_id) as session:
            session.data[USER_KEY] = user.id
        logger.info("login ok user_id=%d (new session)", user.id)
        return LoginResult(session_id=new_id, user=user.public(), created=True)

    def hydrate(self, user_id: int) -> UserRecord:
        """Map the id stored in a session back to its UserRecord.

        Raises NotFound if the user no longer exists.
        """
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    def status(self, session_id: str | None) -> PublicUser | None:
        """Return the authenticated user's public view, or None when anonymous.

        Anonymous covers: no session id, unknown or expired session, no user
        bound, or a bound user id that no longer hydrates. In the last case
        the stale identity and its cart are cleared from the session.
        """
        with self.sessions.locked(session_id) as session:
            if session is None:
                return None
            user_id = session.data.get(USER_KEY)
            if user_id is None:
                return None
            try:
                user = self.hydrate(user_id)
            except NotFound:
                logger.warning("session bound to missing user_id=%s -- clearing identity", user_id)
                session.data.pop(USER_KEY, None)
                session.data.pop(CART_KEY, None)
                return None
            return user.public()

    def logout(self, session_id: str | None) -> None:
        """Destroy the session. Safe to call for absent or anonymous sessions."""
        if self.sessions.destroy(session_id):
            logger.info("logout ok")
