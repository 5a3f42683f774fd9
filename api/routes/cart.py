"""
api/routes/cart.py -- Session cart endpoints.

Routes:
  POST /api/cart  -- append any JSON value to the cart; 201 echoes it back
  GET  /api/cart  -- the cart in insertion order ([] when empty)

Both return 401 unless the session cookie belongs to a logged-in user. The
check lives in CartService, not in a route dependency, so the cart can never
be reached without it.
"""

from typing import Any

from fastapi import APIRouter, Body, Request

from api.models import ErrorResponse
from auth.dependencies import get_session_id
from cart.service import CartService

router = APIRouter(responses={401: {"model": ErrorResponse}})


@router.post("/cart", status_code=201, response_model=None)
def add_to_cart(request: Request, item: Any = Body(...)) -> Any:
    cart: CartService = request.app.state.cart
    return cart.add_item(get_session_id(request), item)


@router.get("/cart", response_model=None)
def get_cart(request: Request) -> list[Any]:
    cart: CartService = request.app.state.cart
    return cart.get_cart(get_session_id(request))
