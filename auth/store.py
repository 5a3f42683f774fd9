"""
auth/store.py -- In-memory repository for user records.

Pattern: Repository. UserStore owns the collection; the auth flow and the
users routes never touch the underlying list directly. The auth core only
reads (find_by_name / find_by_id); create/replace/update/delete exist for the
/api/users admin surface.

Records are frozen dataclasses, so every mutation swaps in a new record via
dataclasses.replace(). Readers holding an old snapshot never see a partially
updated user.

Ids are assigned as last id + 1 (1 for an empty store). Deleting the last
user therefore frees its id for reuse -- acceptable for a process-lifetime
store with no external references to ids.

Thread safety: FastAPI runs sync handlers in a threadpool, so all access to
the list is serialized by a single lock.

Layer rule: no imports from api/, sessions/, or cart/.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Iterable

from auth.models import UserRecord
from core.errors import Conflict, MalformedInput

logger = logging.getLogger("shopsession.auth.store")

DEFAULT_USERS: tuple[UserRecord, ...] = (
    UserRecord(id=1, name="john", display_name="John", password="pass123"),
    UserRecord(id=2, name="jack", display_name="Jack", password="hello123"),
    UserRecord(id=3, name="adam", display_name="Adam", password="hello124"),
    UserRecord(id=4, name="tina", display_name="Tina", password="test123"),
    UserRecord(id=5, name="jason", display_name="Jason", password="jason456"),
)

# Query-string filter names (wire spelling) -> UserRecord attribute.
_FILTER_FIELDS: dict[str, str] = {"name": "name", "displayName": "display_name"}

# PATCH/PUT field names accepted by update_user().
_MUTABLE_FIELDS: frozenset[str] = frozenset({"name", "display_name", "password"})


class UserStore:
    """Repository for UserRecord entities.

    Usage:
        store = UserStore()
        user = store.find_by_name("john")
        created = store.create_user("annabel", "Annabel", password="secret")
    """

    def __init__(self, users: Iterable[UserRecord] = DEFAULT_USERS) -> None:
        self._users: list[UserRecord] = list(users)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_name(self, name: str) -> UserRecord | None:
        """Look up a user by exact name (case-sensitive). Returns None if not found."""
        with self._lock:
            return next((u for u in self._users if u.name == name), None)

    def find_by_id(self, user_id: int) -> UserRecord | None:
        with self._lock:
            return next((u for u in self._users if u.id == user_id), None)

    def list_users(self, filter_field: str | None = None, value: str | None = None) -> list[UserRecord]:
        """Return users in insertion order, optionally filtered by substring.

        The filter only applies when both filter_field and value are given;
        either one alone returns the full list. filter_field uses the wire
        spelling ("name" or "displayName").

        Raises MalformedInput for any other filter_field.
        """
        with self._lock:
            users = list(self._users)
        if not (filter_field and value):
            return users
        attr = _FILTER_FIELDS.get(filter_field)
        if attr is None:
            raise MalformedInput(
                "Unknown filter field.",
                detail=f"filter must be one of {sorted(_FILTER_FIELDS)}",
            )
        return [u for u in users if value in getattr(u, attr)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_user(self, name: str, display_name: str, password: str | None = None) -> UserRecord:
        """Append a new user and return it.

        Raises Conflict if the name is already taken.
        """
        with self._lock:
            self._ensure_name_free(name)
            next_id = self._users[-1].id + 1 if self._users else 1
            user = UserRecord(id=next_id, name=name, display_name=display_name, password=password)
            self._users.append(user)
        logger.info("user created id=%d name=%s", user.id, user.name)
        return user

    def replace_user(
        self, user_id: int, name: str, display_name: str, password: str | None = None
    ) -> UserRecord | None:
        """Replace every mutable field of a user (PUT semantics). The id is preserved.

        Returns the new record, or None if user_id was not found.
        """
        return self.update_user(user_id, name=name, display_name=display_name, password=password)

    def update_user(self, user_id: int, **fields) -> UserRecord | None:
        """Merge the given fields into an existing user (PATCH semantics).

        Accepted fields: name, display_name, password. Raises ValueError for
        anything else -- callers pass validated request models, so an unknown
        key is a programming error. Raises Conflict if a rename collides with
        another user.

        Returns the updated record, or None if user_id was not found.
        """
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {unknown!r}")
        with self._lock:
            index = self._index_of(user_id)
            if index is None:
                return None
            current = self._users[index]
            if "name" in fields and fields["name"] != current.name:
                self._ensure_name_free(fields["name"])
            updated = dataclasses.replace(current, **fields)
            self._users[index] = updated
        logger.info("user updated id=%d fields=%s", user_id, sorted(fields))
        return updated

    def delete_user(self, user_id: int) -> bool:
        """Remove a user. Returns True if deleted, False if not found."""
        with self._lock:
            index = self._index_of(user_id)
            if index is None:
                return False
            del self._users[index]
        logger.info("user deleted id=%d", user_id)
        return True

    # ------------------------------------------------------------------
    # Helpers (caller holds self._lock)
    # ------------------------------------------------------------------

    def _index_of(self, user_id: int) -> int | None:
        for i, user in enumerate(self._users):
            if user.id == user_id:
                return i
        return None

    def _ensure_name_free(self, name: str) -> None:
        if any(u.name == name for u in self._users):
            raise Conflict("A user with that name already exists.")
