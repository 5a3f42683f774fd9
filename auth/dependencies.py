"""
auth/dependencies.py -- FastAPI Depends() helpers and session cookie I/O.

The session id travels in a single cookie (SESSION_COOKIE_NAME, default
"sessionId"). Everything here converts between that cookie and the explicit
session_id arguments the auth flow and cart service take.

try_get_current_user() is the soft variant (returns None when anonymous).
get_current_user() wraps it and raises Unauthenticated (HTTP 401).
require_session() only needs a live session, authenticated or not, and
raises SessionRequired (HTTP 403) otherwise.

Layer rule: no imports from api/ or cart/.
  auth/dependencies.py may import from fastapi (for Request/Response)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request, Response

from auth.flow import AuthFlow
from auth.models import PublicUser
from core.config import get_settings
from core.errors import SessionRequired, Unauthenticated
from sessions.models import SessionCookie


def get_session_id(request: Request) -> str | None:
    """Return the raw session id from the request cookie, or None."""
    return request.cookies.get(get_settings().session_cookie_name) or None


def get_auth_flow(request: Request) -> AuthFlow:
    return request.app.state.auth_flow


def try_get_current_user(request: Request) -> PublicUser | None:
    """Resolve the session cookie to the authenticated user, or None. Never raises."""
    return get_auth_flow(request).status(get_session_id(request))


def get_current_user(request: Request) -> PublicUser:
    """Require authentication. Raises Unauthenticated if the session has no user.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: PublicUser = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise Unauthenticated()
    return user


def require_session(request: Request) -> str:
    """Require a live session cookie (anonymous is fine). Returns the session id."""
    sid = get_session_id(request)
    if request.app.state.session_store.get(sid) is None:
        raise SessionRequired()
    return sid


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def session_cookie(session_id: str) -> SessionCookie:
    settings = get_settings()
    return SessionCookie(
        name=settings.session_cookie_name,
        value=session_id,
        max_age_ms=settings.session_max_age_ms,
    )


def set_session_cookie(response: Response, session_id: str) -> None:
    """Write the session id cookie on the response.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="lax": not sent on cross-site POST -- CSRF mitigation for most cases.
    secure: only sent over HTTPS when SECURE_COOKIES=true (set in production).
    max_age: matches the session store's max-age so both expire together.
    """
    cookie = session_cookie(session_id)
    response.set_cookie(
        cookie.name,
        value=cookie.value,
        httponly=True,
        samesite="lax",
        secure=get_settings().secure_cookies,
        max_age=cookie.max_age_seconds,
    )


def clear_session_cookie(response: Response) -> None:
    """Expire the session cookie with the same attributes it was set with."""
    settings = get_settings()
    response.delete_cookie(
        settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
