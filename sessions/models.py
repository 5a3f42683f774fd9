"""
sessions/models.py -- Session data containers.

SessionState is mutable on purpose: the store hands out the live object and
callers mutate .data while holding SessionStore.locked(sid). Timestamps are
POSIX seconds from the store's clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Conventional slots inside SessionState.data.
USER_KEY = "user"
CART_KEY = "cart"
VISITED_KEY = "visited"


@dataclass
class SessionState:
    id: str
    created_at: float
    expires_at: float
    data: dict[str, Any] = field(default_factory=dict)

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class SessionCookie:
    """What the transport layer needs to issue the session cookie.

    max_age_ms is kept in milliseconds to match configuration; Starlette's
    set_cookie() wants whole seconds, hence max_age_seconds.
    """

    name: str
    value: str
    max_age_ms: int

    @property
    def max_age_seconds(self) -> int:
        return self.max_age_ms // 1000
