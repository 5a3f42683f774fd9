"""
auth/credentials.py -- Name/password verification against the UserStore.

Security design decisions:
  One error for every failure: an unknown name and a wrong password both
       raise InvalidCredentials with the same code and message, so the login
       response never reveals whether a name exists.

  Constant-time compare: secrets.compare_digest() runs even when the name is
       unknown (against a dummy value), keeping the two failure paths on the
       same code path.

  Passwords are plaintext demo values. Nothing here hashes them, and nothing
       here ever logs them.

Layer rule: no imports from api/, sessions/, or cart/.
"""

from __future__ import annotations

import logging
import secrets

from auth.models import UserRecord
from auth.store import UserStore
from core.errors import InvalidCredentials

logger = logging.getLogger("shopsession.auth.credentials")

_DUMMY_PASSWORD = "shopsession_timing_dummy"


def _passwords_match(provided: str, stored: str) -> bool:
    return secrets.compare_digest(provided.encode("utf-8"), stored.encode("utf-8"))


def verify_credentials(store: UserStore, name: str, password: str) -> UserRecord:
    """Return the UserRecord for a valid name/password pair.

    Raises InvalidCredentials for an unknown name, a wrong password, or a
    user with no password set. Has no side effects.
    """
    user = store.find_by_name(name)
    if user is None or user.password is None:
        # Same work as a real comparison; the result is discarded.
        _passwords_match(password, _DUMMY_PASSWORD)
        logger.debug("credential check failed name=%s", name)
        raise InvalidCredentials()
    if not _passwords_match(password, user.password):
        logger.debug("credential check failed name=%s", name)
        raise InvalidCredentials()
    logger.debug("credential check ok user_id=%d", user.id)
    return user
