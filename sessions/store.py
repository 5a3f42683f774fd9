"""
sessions/store.py -- In-memory, thread-safe session store.

Maps opaque session ids to SessionState with a configurable max-age.
Single-process only: a multi-instance deployment would put a shared store
(Redis etc.) behind the same interface.

Usage:
    store = SessionStore(max_age_seconds=86400)
    sid = store.create()
    with store.locked(sid) as session:
        if session is not None:
            session.data["visited"] = True
    store.get(sid)            # SessionState or None (unknown / expired)
    store.destroy(sid)
    store.sweep_expired()     # call periodically to trim abandoned sessions

Expiry:
  Absolute (default): expires_at is fixed at created_at + max_age.
  Sliding: touch() pushes expires_at to now + max_age on every access.
  An expired entry is indistinguishable from an unknown one. get() evicts
  it on sight; sweep_expired() removes the rest on a timer so abandoned
  sessions do not accumulate.

Locking:
  _lock guards the two dicts (insert/delete/lookup). Each session also owns
  an RLock; locked(sid) holds it while the caller mutates session.data, so
  two requests appending to the same cart are serialized while requests on
  different sessions never wait on each other. Lock order is always
  per-session lock first, then _lock (get() inside locked()), never the
  reverse.

Layer rule: stdlib only.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sessions.models import SessionState

logger = logging.getLogger("shopsession.sessions")

# 32 random bytes -> 43 url-safe characters.
_SID_BYTES = 32


def _new_session_id() -> str:
    return secrets.token_urlsafe(_SID_BYTES)


def _short(sid: str) -> str:
    """Log-safe prefix of a session id. Full ids are bearer credentials."""
    return sid[:8]


class SessionStore:
    def __init__(
        self,
        max_age_seconds: float,
        sliding_expiration: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be positive")
        self.max_age_seconds = max_age_seconds
        self.sliding_expiration = sliding_expiration
        self._clock = clock
        self._sessions: dict[str, SessionState] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    def create(self) -> str:
        """Allocate a new empty session and return its id."""
        now = self._clock()
        with self._lock:
            sid = _new_session_id()
            while sid in self._sessions:
                sid = _new_session_id()
            self._sessions[sid] = SessionState(id=sid, created_at=now, expires_at=now + self.max_age_seconds)
            self._locks[sid] = threading.RLock()
        logger.debug("session created sid=%s...", _short(sid))
        return sid

    def ensure(self, sid: str | None) -> tuple[str, bool]:
        """Return (sid, False) if sid is live, else (new_sid, True)."""
        if self.get(sid) is not None:
            return sid, False
        return self.create(), True

    def get(self, sid: str | None) -> SessionState | None:
        """Return the live session for sid, or None if unknown or expired."""
        if not sid:
            return None
        with self._lock:
            return self._live(sid)

    def touch(self, sid: str | None) -> bool:
        """Refresh the expiry window under sliding expiration.

        Returns True if the session is live (whether or not the window
        moved), False if it is unknown or expired.
        """
        if not sid:
            return False
        with self._lock:
            session = self._live(sid)
            if session is None:
                return False
            if self.sliding_expiration:
                session.expires_at = self._clock() + self.max_age_seconds
            return True

    def destroy(self, sid: str | None) -> bool:
        """Remove a session immediately. Returns True if something was removed."""
        if not sid:
            return False
        with self._lock:
            removed = self._evict(sid)
        if removed:
            logger.debug("session destroyed sid=%s...", _short(sid))
        return removed

    def sweep_expired(self) -> int:
        """Delete every expired session. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
            for sid in expired:
                self._evict(sid)
        if expired:
            logger.info("swept %d expired session(s), %d live", len(expired), len(self))
        return len(expired)

    @contextmanager
    def locked(self, sid: str | None) -> Iterator[SessionState | None]:
        """Hold the per-session lock and yield the live session (or None).

        The session is re-resolved after the lock is acquired, so a session
        destroyed or expired while this call was waiting yields None.
        """
        with self._lock:
            session_lock = self._locks.get(sid) if sid else None
        if session_lock is None:
            yield None
            return
        with session_lock:
            yield self.get(sid)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    # ------------------------------------------------------------------
    # Helpers (caller holds self._lock)
    # ------------------------------------------------------------------

    def _live(self, sid: str) -> SessionState | None:
        session = self._sessions.get(sid)
        if session is None:
            return None
        if session.is_expired(self._clock()):
            self._evict(sid)
            logger.debug("session expired sid=%s...", _short(sid))
            return None
        return session

    def _evict(self, sid: str) -> bool:
        self._locks.pop(sid, None)
        return self._sessions.pop(sid, None) is not None
