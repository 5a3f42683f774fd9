"""
api/routes/auth.py -- Session login, status, and logout endpoints.

Routes:
  POST /api/auth          -- name/password login; sets the session cookie
  GET  /api/auth/status   -- current user's public view, 401 when anonymous
  POST /api/auth/logout   -- destroys the session and clears the cookie; 200

Security:
  POST /auth is rate-limited (LOGIN_RATE_LIMIT, default 10/minute per IP).
  Unknown name and wrong password return the same bad_credentials error.
  Cache-Control: no-store on login responses.
  No response ever includes a password.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import ErrorResponse, LoginRequest, MessageResponse, UserResponse
from auth.dependencies import (
    clear_session_cookie,
    get_auth_flow,
    get_current_user,
    get_session_id,
    set_session_cookie,
)
from auth.models import PublicUser
from core.config import get_settings

# Auth policy:
# - POST /api/auth:         public -- login endpoint must be unauthenticated
# - GET  /api/auth/status:  authenticated -- get_current_user raises 401 for anonymous callers
# - POST /api/auth/logout:  public -- destroying an absent session is a no-op
router = APIRouter()


@router.post(
    "/auth",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
)
@limiter.limit(get_settings().login_rate_limit)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with name and password and bind the user to the session.

    An existing anonymous session cookie is kept, so the client's session id
    does not change across login. The cookie is (re)issued either way so its
    max-age restarts with the login.
    """
    result = get_auth_flow(request).login(get_session_id(request), body.name, body.password)

    resp = JSONResponse(
        status_code=200,
        content=UserResponse.from_user(result.user).model_dump(by_alias=True),
    )
    set_session_cookie(resp, result.session_id)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get(
    "/auth/status",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
)
def auth_status(user: PublicUser = Depends(get_current_user)) -> UserResponse:
    """Report who the session belongs to. Anonymous sessions get 401 unauthorized."""
    return UserResponse.from_user(user)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request) -> JSONResponse:
    """Destroy the session and clear the cookie. Idempotent."""
    get_auth_flow(request).logout(get_session_id(request))
    resp = JSONResponse(content=MessageResponse(msg="Logged out.").model_dump())
    clear_session_cookie(resp)
    return resp
