"""
cart/service.py -- Per-session shopping cart gated on authentication.

The cart lives in SessionState.data["cart"] as a plain list of whatever JSON
payloads the client posted. No dedup, no quantity merging: every add_item()
call is its own entry, in insertion order.

Both operations check AuthFlow.status() first, so a cart can only be created
or read while a user is bound to the session. Logout destroys the session,
which takes the cart with it.
"""

from __future__ import annotations

import logging
from typing import Any

from auth.flow import AuthFlow
from core.errors import Unauthenticated
from sessions.models import CART_KEY

logger = logging.getLogger("shopsession.cart")


class CartService:
    def __init__(self, auth: AuthFlow) -> None:
        self.auth = auth

    def add_item(self, session_id: str | None, item: Any) -> Any:
        """Append item to the session's cart and return it unchanged.

        Raises Unauthenticated if the session is not authenticated.
        """
        with self.auth.sessions.locked(session_id) as session:
            user = self.auth.status(session_id)
            if session is None or user is None:
                raise Unauthenticated()
            session.data.setdefault(CART_KEY, []).append(item)
            size = len(session.data[CART_KEY])
        logger.info("cart item added user_id=%d size=%d", user.id, size)
        return item

    def get_cart(self, session_id: str | None) -> list[Any]:
        """Return a copy of the cart ([] if nothing was added yet).

        Raises Unauthenticated if the session is not authenticated.
        """
        with self.auth.sessions.locked(session_id) as session:
            if session is None or self.auth.status(session_id) is None:
                raise Unauthenticated()
            return list(session.data.get(CART_KEY, []))
