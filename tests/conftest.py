"""
tests/conftest.py -- Shared test fixtures for the billboard marketplace tests.

This module provides:
  - engine / store fixtures: a fresh named in-memory SQLite database per test
  - _make_test_engine(): the same engine factory the app uses, on a memory URI
  - _patch_lifespan(): wires every store onto app.state, bypassing real startup
  - api_client: TestClient over the real app, one database per test module

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

DEBUG, BCRYPT_ROUNDS and RATE_LIMIT_ENABLED must be set before any project
import: get_settings() is cached on first use and the limiter reads it at
import time.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any api/auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app, attach_services
from auth.models import Admin, User
from auth.sessions import SessionService
from auth.store import AdminStore, UserStore
from core.config import get_settings
from core.db import create_db_engine
from locations.store import LocationStore
from orders.store import OrderStore
from products.store import ProductStore

# ---------------------------------------------------------------------------
# Engine helpers
# ---------------------------------------------------------------------------


def _make_test_engine(db_name: str) -> Engine:
    """Engine over an isolated named shared-memory SQLite database.

    Args:
        db_name: Unique name so tests and modules never share state.
    """
    return create_db_engine(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(engine: Engine):
    """Return an async context manager that replaces the real lifespan.

    Wires stores built on the test engine into app.state so TestClient routes
    see an isolated database rather than billboard.db.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        attach_services(app, engine, get_settings())
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Store fixtures -- fresh database per test
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    eng = _make_test_engine(f"unit_{uuid.uuid4().hex}")
    yield eng
    eng.dispose()


@pytest.fixture
def admin_store(engine: Engine) -> AdminStore:
    return AdminStore(engine)


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def admin_sessions(admin_store: AdminStore) -> SessionService:
    return SessionService(admin_store, secret_key=get_settings().secret_key, expire_seconds=3600)


@pytest.fixture
def user_sessions(user_store: UserStore) -> SessionService:
    return SessionService(user_store, secret_key=get_settings().secret_key, expire_seconds=3600)


@pytest.fixture
def locations(engine: Engine) -> LocationStore:
    return LocationStore(engine)


@pytest.fixture
def products(engine: Engine, locations: LocationStore) -> ProductStore:
    return ProductStore(engine, locations)


@pytest.fixture
def orders(engine: Engine, products: ProductStore) -> OrderStore:
    return OrderStore(engine, products)


@pytest.fixture
def admin(admin_store: AdminStore) -> Admin:
    """A persisted administrator whose password is 'adminpass1'."""
    return admin_store.create(
        Admin(first_name="Ada", last_name="Obi", username="ada", email="ada@example.com"),
        "adminpass1",
    )


@pytest.fixture
def user(user_store: UserStore) -> User:
    """A persisted user whose password is 'userpass1'."""
    return user_store.create(
        User(
            full_name="Tunde Bello",
            email="tunde@example.com",
            phone_no="+2348012345678",
            company_name="Bello Foods",
        ),
        "userpass1",
    )


# ---------------------------------------------------------------------------
# Module-scoped API fixture -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request: pytest.FixtureRequest) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app with an isolated per-module database.

    Tests hit real route handlers, dependencies and exception handlers; only
    the lifespan is swapped so nothing touches the production database.
    """
    engine = _make_test_engine(f"api_{request.module.__name__.replace('.', '_')}")
    app.router.lifespan_context = _patch_lifespan(engine)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    engine.dispose()
