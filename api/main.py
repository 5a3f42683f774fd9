"""
api/main.py -- FastAPI application entry point for ShopSession.

Run with:      python main.py
               uvicorn asgi:app --reload

Middleware stack (outermost to innermost; Starlette wraps the last-added
middleware outermost):
  1. log_requests          -- one log line per request with latency
  2. touch_session         -- slides the session window (and cookie) on every request
  3. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter
  4. CORSMiddleware        -- adds CORS headers for allowed browser origins

Lifespan builds the in-memory stores on startup and starts the session
sweep task; shutdown cancels the task. All state lives on app.state, so a
fresh lifespan (e.g. a new TestClient context) means fresh stores.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse, MessageResponse
from api.routes.auth import router as auth_router
from api.routes.cart import router as cart_router
from api.routes.products import router as products_router
from api.routes.users import router as users_router
from auth.dependencies import get_session_id, set_session_cookie
from auth.flow import AuthFlow
from auth.store import UserStore
from cart.service import CartService
from core.catalog import ProductCatalog
from core.config import Settings, get_settings
from core.errors import AppError
from sessions.models import VISITED_KEY
from sessions.store import SessionStore

VERSION = "0.1.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, _settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("shopsession.api")

# ---------------------------------------------------------------------------
# Background sweep task
# ---------------------------------------------------------------------------


async def _sweep_loop(app: FastAPI, interval_seconds: float) -> None:
    """Remove expired sessions every interval_seconds.

    Runs as a background asyncio task started in lifespan startup, never from
    a request. CancelledError from task.cancel() during shutdown propagates
    out of asyncio.sleep and unwinds the coroutine cleanly.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        app.state.session_store.sweep_expired()


def init_state(app: FastAPI, settings: Settings) -> None:
    """Create the stores and services and hang them on app.state."""
    app.state.user_store = UserStore()
    app.state.session_store = SessionStore(
        max_age_seconds=settings.session_max_age_seconds,
        sliding_expiration=settings.sliding_expiration,
    )
    app.state.auth_flow = AuthFlow(app.state.user_store, app.state.session_store)
    app.state.cart = CartService(app.state.auth_flow)
    app.state.catalog = ProductCatalog()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build state on startup, tear down the sweep task on shutdown."""
    settings = get_settings()
    logger.info("ShopSession API starting up")
    init_state(app, settings)
    logger.info(
        "Session store initialized (max_age=%.0fs, sliding=%s, sweep every %gs)",
        settings.session_max_age_seconds,
        settings.sliding_expiration,
        settings.session_sweep_interval_seconds,
    )
    app.state.sweep_task = asyncio.create_task(_sweep_loop(app, settings.session_sweep_interval_seconds))

    yield

    app.state.sweep_task.cancel()
    logger.info("ShopSession API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="ShopSession API",
    description="Users, products, and a session-backed cart.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost", "http://localhost:3000", "http://127.0.0.1"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Session touch middleware
#
# Every request that carries a live session cookie refreshes the session's
# expiry window (a no-op under absolute expiry). Runs before the route so the
# handler sees the refreshed expires_at. Under sliding expiry the cookie is
# reissued too, so its Max-Age tracks expires_at.
# ---------------------------------------------------------------------------


def _sets_session_cookie(response: Response) -> bool:
    prefix = f"{get_settings().session_cookie_name}="
    return any(h.startswith(prefix) for h in response.headers.getlist("set-cookie"))


@app.middleware("http")
async def touch_session(request: Request, call_next):
    store: SessionStore | None = getattr(request.app.state, "session_store", None)
    sid = get_session_id(request)
    live = store is not None and store.touch(sid)
    response = await call_next(request)
    # Skip when the route replaced or cleared the cookie (login, logout).
    if live and store.sliding_expiration and not _sets_session_cookie(response):
        if store.get(sid) is not None:
            set_session_cookie(response, sid)
    return response


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(cart_router, prefix="/api", tags=["Cart"])
app.include_router(products_router, prefix="/api", tags=["Products"])
app.include_router(users_router, prefix="/api", tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map every expected domain failure to its HTTP status."""
    if exc.status >= 500:
        logger.error("AppError %s on %s %s", exc.code, request.method, request.url.path)
    else:
        logger.debug("AppError %s on %s %s", exc.code, request.method, request.url.path)
    return JSONResponse(
        status_code=int(exc.status),
        content=ErrorResponse(error=ErrorDetail(**exc.to_dict())).model_dump(),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="rate_limited",
                message="Too many requests.",
                detail=str(exc),
            )
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with structured error when request body, path or query fail validation."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=[{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()],
            )
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for framework-raised HTTP exceptions (404 route, 405, ...)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Root and health endpoints
#
# Defined directly in main.py (not in a router) so they are always reachable
# regardless of router registration state.
# ---------------------------------------------------------------------------


@app.get("/", status_code=201, response_model=MessageResponse, tags=["Session"])
def index(request: Request, response: Response) -> MessageResponse:
    """Start (or keep) an anonymous session and mark it as visited."""
    store: SessionStore = request.app.state.session_store
    sid, created = store.ensure(get_session_id(request))
    with store.locked(sid) as session:
        if session is not None:
            session.data[VISITED_KEY] = True
    if created:
        set_session_cookie(response, sid)
    return MessageResponse(msg="Hello World!")


@app.get("/api/health", tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and live session count."""
    store: SessionStore = request.app.state.session_store
    return HealthResponse(
        version=VERSION,
        components={"app": "ok", "session_store": "ok"},
        active_sessions=len(store),
    )
