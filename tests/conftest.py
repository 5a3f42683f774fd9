"""
tests/conftest.py -- Shared test fixtures for ShopSession tests.

This module provides:
  - client: a TestClient bound to a fresh app lifespan (fresh stores per test)
  - login(): helper that POSTs /api/auth and asserts success
  - FakeClock / clock: a manually advanced clock for SessionStore expiry tests

Design: every test gets its own `with TestClient(app)` block, so the real
lifespan runs and init_state() builds new UserStore / SessionStore instances.
Nothing leaks between tests through app.state or the cookie jar.

RATE_LIMIT_ENABLED must be set before any api/ import: api/limiter.py reads
get_settings() once at import time, and the suite logs in far more often than
the production limit allows.
"""

from __future__ import annotations

import os
from collections.abc import Generator

# CRITICAL: set before importing api.main so the limiter starts disabled.
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app

SESSION_COOKIE = "sessionId"


class FakeClock:
    """Callable clock for SessionStore(clock=...). Starts at a fixed epoch."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Yield a TestClient running the real lifespan with fresh in-memory state."""
    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client


def login(client: TestClient, name: str = "john", password: str = "pass123") -> dict:
    """Log in through the API and return the response body."""
    resp = client.post("/api/auth", json={"name": name, "password": password})
    assert resp.status_code == 200, f"Login as {name} failed: {resp.status_code} {resp.text}"
    return resp.json()
