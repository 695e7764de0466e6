"""
api/main.py -- FastAPI application entry point for the billboard marketplace.

Exposes the credential stores, session services, location directory, product
catalog and order book over HTTP under /api/v1.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Middleware stack (outermost to innermost):
  1. CORSMiddleware     -- adds CORS headers for allowed browser origins
  2. SlowAPIMiddleware  -- enforces the global and per-route rate limits from api.limiter

Lifespan builds the one Engine for the process, constructs every store and
both SessionServices on app.state, and disposes the Engine on shutdown.
Nothing holds a connection at import time.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorResponse, HealthResponse
from api.routes.v1.admins import router as admins_router
from api.routes.v1.catalog import router as catalog_router
from api.routes.v1.locations import router as locations_router
from api.routes.v1.orders import router as orders_router
from api.routes.v1.products import router as products_router
from api.routes.v1.users import router as users_router
from auth.sessions import SessionService
from auth.store import AdminStore, UserStore
from core.config import Settings, get_settings
from core.db import create_db_engine, ping
from core.errors import AppError
from locations.store import LocationStore
from orders.store import OrderStore
from products.store import ProductStore

API_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("billboard.api")


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


def attach_services(app: FastAPI, engine: Engine, settings: Settings) -> None:
    """Construct every store and session service over engine and hang them on app.state.

    Route handlers and AuthGate look services up by these attribute names.
    The test suite calls this from its patched lifespan with an in-memory engine.
    """
    app.state.engine = engine
    app.state.admin_store = AdminStore(engine)
    app.state.user_store = UserStore(engine)
    app.state.admin_sessions = SessionService(
        app.state.admin_store, secret_key=settings.secret_key, expire_seconds=settings.token_expire_seconds
    )
    app.state.user_sessions = SessionService(
        app.state.user_store, secret_key=settings.secret_key, expire_seconds=settings.token_expire_seconds
    )
    app.state.locations = LocationStore(engine)
    app.state.products = ProductStore(engine, app.state.locations)
    app.state.orders = OrderStore(engine, app.state.products)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Connect once at startup, tear down on shutdown.

    Everything before yield runs on startup; everything after yield runs on
    shutdown, even if a request handler raised.
    """
    settings = get_settings()
    logger.info("Billboard API starting up")
    engine = create_db_engine(settings.database_url)
    attach_services(app, engine, settings)
    logger.info("Stores initialized")

    yield

    engine.dispose()
    logger.info("Billboard API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Billboard Marketplace API",
    description="Outdoor advertising marketplace: billboard listings by state and area, orders and quotes.",
    version=API_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


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

app.include_router(admins_router, prefix="/api/v1", tags=["Administrators"])
app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(locations_router, prefix="/api/v1", tags=["Locations"])
app.include_router(products_router, prefix="/api/v1", tags=["Products"])
app.include_router(catalog_router, prefix="/api/v1", tags=["Catalog"])
app.include_router(orders_router, prefix="/api/v1", tags=["Orders"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same {status, message} envelope so API clients can
# parse errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(status=status_code, message=message).model_dump(),
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map the domain error taxonomy onto its HTTP status."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s", exc.message, request.method, request.url.path)
    return _error(exc.status_code, exc.message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 when a rate limit is exceeded.

    Retry-After tells clients how many seconds to wait before retrying.
    """
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error(429, "Too many requests from this IP. Please try again later.")
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing body/query fields are a 400, reported by their first error."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "invalid value")
    else:
        message = "Invalid request"
    return _error(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework errors (unknown route, wrong method) in the same envelope."""
    if exc.status_code == 404:
        message = f"Sorry, this route {request.method} {request.url.path} doesn't exist"
    else:
        message = str(exc.detail)
    response = _error(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "Internal Server Error")


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. Exempt from rate limiting so load
# balancers and monitoring systems are never throttled.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
@limiter.exempt
def health(request: Request) -> HealthResponse:
    """Return API liveness, version and database reachability."""
    database = "ok" if ping(request.app.state.engine) else "unavailable"
    return HealthResponse(
        status="healthy" if database == "ok" else "degraded",
        version=API_VERSION,
        components={"app": "ok", "database": database},
    )
