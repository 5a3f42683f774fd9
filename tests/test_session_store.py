"""
tests/test_session_store.py -- Unit tests for sessions/store.py.

All expiry tests drive the store with FakeClock so nothing sleeps.

Coverage:
  - create/get/destroy lifecycle, id uniqueness and shape
  - absolute vs sliding expiry
  - expired entries are evicted on read and by sweep_expired()
  - locked() yields None for unknown, destroyed, or expired sessions
"""

from __future__ import annotations

import pytest

from sessions.models import SessionCookie
from sessions.store import SessionStore


class TestLifecycle:
    def test_create_returns_live_empty_session(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        sid = store.create()
        session = store.get(sid)
        assert session is not None
        assert session.id == sid
        assert session.data == {}
        assert session.created_at == clock.now
        assert session.expires_at == clock.now + 60

    def test_ids_are_unique_and_unguessable_length(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        ids = {store.create() for _ in range(50)}
        assert len(ids) == 50
        assert all(len(sid) >= 43 for sid in ids), "32 random bytes encode to 43 url-safe chars"

    def test_get_unknown_and_empty_ids(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        assert store.get("missing") is None
        assert store.get("") is None
        assert store.get(None) is None

    def test_destroy(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        sid = store.create()
        assert store.destroy(sid) is True
        assert store.get(sid) is None
        assert store.destroy(sid) is False, "Destroying twice is a no-op"
        assert store.destroy(None) is False

    def test_ensure_keeps_live_and_replaces_dead(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        sid = store.create()
        assert store.ensure(sid) == (sid, False)
        new_sid, created = store.ensure("bogus")
        assert created is True
        assert new_sid != "bogus"
        assert store.get(new_sid) is not None

    def test_rejects_non_positive_max_age(self) -> None:
        with pytest.raises(ValueError):
            SessionStore(max_age_seconds=0)

    def test_len_counts_stored_sessions(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        store.create()
        store.create()
        assert len(store) == 2


class TestExpiry:
    def test_absolute_expiry_at_boundary(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        sid = store.create()
        clock.advance(59)
        assert store.get(sid) is not None
        clock.advance(1)
        assert store.get(sid) is None, "Session must be gone exactly at created_at + max_age"

    def test_expired_session_is_evicted_on_read(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        sid = store.create()
        clock.advance(61)
        assert store.get(sid) is None
        assert len(store) == 0

    def test_touch_does_not_extend_absolute_expiry(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        sid = store.create()
        clock.advance(50)
        assert store.touch(sid) is True
        clock.advance(15)
        assert store.get(sid) is None

    def test_touch_extends_sliding_expiry(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, sliding_expiration=True, clock=clock)
        sid = store.create()
        clock.advance(50)
        assert store.touch(sid) is True
        clock.advance(50)
        assert store.get(sid) is not None, "Sliding window must restart on touch"
        clock.advance(11)
        assert store.get(sid) is None

    def test_touch_unknown_or_expired(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, sliding_expiration=True, clock=clock)
        assert store.touch("missing") is False
        sid = store.create()
        clock.advance(60)
        assert store.touch(sid) is False, "An expired session cannot be revived"

    def test_sweep_removes_only_expired(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        old = store.create()
        clock.advance(30)
        young = store.create()
        clock.advance(30)
        assert store.sweep_expired() == 1
        assert store.get(old) is None
        assert store.get(young) is not None
        assert store.sweep_expired() == 0


class TestLocked:
    def test_locked_yields_live_session(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        sid = store.create()
        with store.locked(sid) as session:
            session.data["visited"] = True
        assert store.get(sid).data == {"visited": True}

    def test_locked_is_reentrant(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        sid = store.create()
        with store.locked(sid) as outer:
            with store.locked(sid) as inner:
                assert inner is outer

    def test_locked_yields_none_for_dead_sessions(self, clock) -> None:
        store = SessionStore(max_age_seconds=60, clock=clock)
        with store.locked(None) as session:
            assert session is None
        with store.locked("missing") as session:
            assert session is None

        destroyed = store.create()
        store.destroy(destroyed)
        with store.locked(destroyed) as session:
            assert session is None

        expired = store.create()
        clock.advance(60)
        with store.locked(expired) as session:
            assert session is None


def test_session_cookie_max_age_in_seconds() -> None:
    cookie = SessionCookie(name="sessionId", value="abc", max_age_ms=86_400_000)
    assert cookie.max_age_seconds == 86_400
