"""sessions/ -- Server-side session storage for ShopSession.

Layer rule: sessions/ imports only stdlib. It knows nothing about users,
carts, or HTTP; auth/ and cart/ decide what goes into SessionState.data.
"""
