"""
tests/test_auth_flow.py -- Unit tests for AuthFlow and CartService without HTTP.

These pin the session state machine directly: which session a login lands
in, what status() reports after the bound user changes, and that the cart
follows the session rather than the user.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from auth.flow import AuthFlow
from auth.store import UserStore
from cart.service import CartService
from core.errors import InvalidCredentials, NotFound, Unauthenticated
from sessions.models import CART_KEY, USER_KEY
from sessions.store import SessionStore


@pytest.fixture
def flow(clock) -> AuthFlow:
    return AuthFlow(UserStore(), SessionStore(max_age_seconds=60, clock=clock))


@pytest.fixture
def cart(flow) -> CartService:
    return CartService(flow)


class TestLogin:
    def test_login_without_session_creates_one(self, flow) -> None:
        result = flow.login(None, "john", "pass123")
        assert result.created is True
        assert result.user.name == "john"
        assert flow.sessions.get(result.session_id).data[USER_KEY] == 1

    def test_login_reuses_anonymous_session(self, flow) -> None:
        sid = flow.sessions.create()
        result = flow.login(sid, "john", "pass123")
        assert result.session_id == sid
        assert result.created is False

    def test_login_replaces_session_of_other_user(self, flow, cart) -> None:
        first = flow.login(None, "john", "pass123")
        cart.add_item(first.session_id, {"name": "widget"})
        second = flow.login(first.session_id, "jack", "hello123")
        assert second.session_id != first.session_id
        assert flow.sessions.get(first.session_id) is None
        assert cart.get_cart(second.session_id) == []

    def test_relogin_same_user_keeps_cart(self, flow, cart) -> None:
        first = flow.login(None, "john", "pass123")
        cart.add_item(first.session_id, "widget")
        again = flow.login(first.session_id, "john", "pass123")
        assert again.session_id == first.session_id
        assert cart.get_cart(again.session_id) == ["widget"]

    def test_failed_login_leaves_session_untouched(self, flow) -> None:
        sid = flow.sessions.create()
        with pytest.raises(InvalidCredentials):
            flow.login(sid, "john", "nope")
        assert flow.sessions.get(sid).data == {}
        assert len(flow.sessions) == 1

    def test_login_with_expired_session_creates_new(self, flow, clock) -> None:
        sid = flow.sessions.create()
        clock.advance(61)
        result = flow.login(sid, "john", "pass123")
        assert result.created is True
        assert result.session_id != sid


class TestStatus:
    def test_anonymous_cases(self, flow) -> None:
        assert flow.status(None) is None
        assert flow.status("missing") is None
        assert flow.status(flow.sessions.create()) is None

    def test_status_reflects_rename(self, flow) -> None:
        sid = flow.login(None, "john", "pass123").session_id
        flow.users.update_user(1, display_name="Johnny")
        assert flow.status(sid).display_name == "Johnny"

    def test_deleted_user_becomes_anonymous(self, flow, cart) -> None:
        sid = flow.login(None, "john", "pass123").session_id
        cart.add_item(sid, "widget")
        flow.users.delete_user(1)
        assert flow.status(sid) is None
        data = flow.sessions.get(sid).data
        assert USER_KEY not in data
        assert CART_KEY not in data

    def test_hydrate_missing_user(self, flow) -> None:
        with pytest.raises(NotFound):
            flow.hydrate(42)

    def test_logout_destroys_session(self, flow) -> None:
        sid = flow.login(None, "john", "pass123").session_id
        flow.logout(sid)
        assert flow.sessions.get(sid) is None
        flow.logout(sid)
        flow.logout(None)


class TestCart:
    def test_cart_requires_authentication(self, flow, cart) -> None:
        anonymous = flow.sessions.create()
        with pytest.raises(Unauthenticated):
            cart.add_item(anonymous, "widget")
        with pytest.raises(Unauthenticated):
            cart.get_cart(anonymous)
        with pytest.raises(Unauthenticated):
            cart.get_cart(None)

    def test_cart_keeps_insertion_order_and_duplicates(self, flow, cart) -> None:
        sid = flow.login(None, "john", "pass123").session_id
        for item in ("a", {"b": 2}, "a"):
            assert cart.add_item(sid, item) == item
        assert cart.get_cart(sid) == ["a", {"b": 2}, "a"]

    def test_get_cart_returns_copy(self, flow, cart) -> None:
        sid = flow.login(None, "john", "pass123").session_id
        cart.get_cart(sid).append("sneaky")
        assert cart.get_cart(sid) == []

    def test_expired_session_loses_cart_access(self, flow, cart, clock) -> None:
        sid = flow.login(None, "john", "pass123").session_id
        cart.add_item(sid, "widget")
        clock.advance(60)
        assert flow.status(sid) is None
        with pytest.raises(Unauthenticated):
            cart.add_item(sid, "gadget")
        with pytest.raises(Unauthenticated):
            cart.get_cart(sid)

    def test_carts_are_per_session(self, flow, cart) -> None:
        john = flow.login(None, "john", "pass123").session_id
        tina = flow.login(None, "tina", "test123").session_id
        cart.add_item(john, "widget")
        assert cart.get_cart(tina) == []


class TestConcurrentCart:
    """Appends to one session from many threads are serialized by the session lock."""

    def test_parallel_appends_are_all_kept(self, flow, cart) -> None:
        sid = flow.login(None, "john", "pass123").session_id
        threads, per_thread = 8, 200

        def worker(n: int) -> None:
            for i in range(per_thread):
                cart.add_item(sid, {"thread": n, "seq": i})

        with ThreadPoolExecutor(max_workers=threads) as pool:
            for future in [pool.submit(worker, n) for n in range(threads)]:
                future.result()

        items = cart.get_cart(sid)
        assert len(items) == threads * per_thread, "No append may be lost"
        for n in range(threads):
            seqs = [item["seq"] for item in items if item["thread"] == n]
            assert seqs == list(range(per_thread)), f"Thread {n} items out of order"

    def test_destroy_during_appends(self, flow, cart) -> None:
        """Destroying the session mid-stream only turns later appends into Unauthenticated."""
        sid = flow.login(None, "john", "pass123").session_id

        def worker() -> None:
            for i in range(200):
                try:
                    cart.add_item(sid, i)
                except Unauthenticated:
                    return

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(worker) for _ in range(4)]
            flow.logout(sid)
            for future in futures:
                future.result()  # re-raises anything other than Unauthenticated

        assert flow.sessions.get(sid) is None
        with pytest.raises(Unauthenticated):
            cart.get_cart(sid)
