"""
tests/test_rate_limit.py -- Integration tests for login rate limiting.

The suite runs with RATE_LIMIT_ENABLED=false; the limiter_on fixture switches
the shared limiter on for one test and clears its counters afterwards so no
other module sees the hits.

Covers:
  - repeated admin logins from one client end in 429
  - the 429 uses the {status, message} envelope and carries Retry-After
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter


@pytest.fixture
def limiter_on(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    limiter.reset()
    monkeypatch.setattr(limiter, "enabled", True)
    yield
    limiter.reset()


def test_login_flood_returns_429_envelope(api_client: TestClient, limiter_on: None) -> None:
    body = {"email": "nobody@x.com", "password": "wrongpass"}
    statuses = []
    resp = None
    for _ in range(50):
        resp = api_client.post("/api/v1/admin/login", json=body)
        statuses.append(resp.status_code)
        if resp.status_code == 429:
            break

    assert statuses[0] == 404
    assert resp is not None and resp.status_code == 429
    assert resp.json() == {"status": 429, "message": "Too many requests from this IP. Please try again later."}
    assert int(resp.headers["Retry-After"]) > 0


def test_limiter_off_never_throttles(api_client: TestClient) -> None:
    body = {"email": "nobody@x.com", "password": "wrongpass"}
    for _ in range(15):
        assert api_client.post("/api/v1/admin/login", json=body).status_code == 404
