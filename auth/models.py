"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and the auth
flow do the work; these only own the shape.

Layer rule: no imports from api/, sessions/, or cart/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UserRecord:
    """A user known to the UserStore.

    password is plaintext and exists only for the demo login; it never leaves
    the auth layer. None means the account has no local password and can
    never log in (users created through POST /api/users without one).
    """

    id: int
    name: str
    display_name: str
    password: str | None = None

    def public(self) -> PublicUser:
        return PublicUser(id=self.id, name=self.name, display_name=self.display_name)


@dataclass(frozen=True)
class PublicUser:
    """The subset of a UserRecord that is safe to return to a client."""

    id: int
    name: str
    display_name: str
