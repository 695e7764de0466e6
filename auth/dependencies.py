"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

AuthGate is the single request-boundary check that business handlers trust for
principal identity. It reads "Authorization: Bearer <token>", asks the
SessionService for its principal kind to validate the token, and hands the
handler an AuthContext carrying both the principal and the raw token (logout
needs the exact token to revoke).

Two independent gate instances exist, one per kind:

    @router.get("/admin/profile")
    def profile(ctx: AuthContext = Depends(require_admin)): ...

    @router.get("/profile")
    def profile(ctx: AuthContext = Depends(require_user)): ...

A missing or malformed header is rejected before any storage access. Expired,
forged and revoked tokens all produce the same Unauthorized.

Layer rule: no imports from locations/, products/, or orders/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Request

from auth.models import ADMIN, USER
from auth.sessions import UNAUTHORIZED_MESSAGE, SessionService
from core.errors import Unauthorized


@dataclass(frozen=True)
class AuthContext:
    """Authenticated principal plus the exact token that authenticated it."""

    principal: Any
    token: str


def bearer_token(request: Request) -> str:
    """Extract the token from "Authorization: Bearer <token>" or raise Unauthorized."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise Unauthorized(UNAUTHORIZED_MESSAGE)
    return token


class AuthGate:
    """Dependency that authenticates one principal kind.

    The SessionService is looked up on app.state as "<kind>_sessions", which
    the lifespan wires to the store for that kind.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind

    def __call__(self, request: Request) -> AuthContext:
        token = bearer_token(request)
        sessions: SessionService = getattr(request.app.state, f"{self.kind}_sessions")
        principal = sessions.validate(token)
        return AuthContext(principal=principal, token=token)


require_admin = AuthGate(ADMIN)
require_user = AuthGate(USER)
