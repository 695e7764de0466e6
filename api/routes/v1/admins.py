"""
api/routes/v1/admins.py -- Administrator account and session REST endpoints.

Routes:
  POST   /api/v1/admin/signup          -- create an administrator; 201
  POST   /api/v1/admin/login           -- email/password login; returns bearer token
  POST   /api/v1/admin/logout          -- revoke the token used for this request
  POST   /api/v1/admin/logoutAll       -- revoke every token of this administrator
  GET    /api/v1/admin/profile         -- current administrator (requires admin)
  PATCH  /api/v1/admin/updateInfo      -- update first/last name or username (requires admin)
  PATCH  /api/v1/admin/updatePassword  -- change password; revokes every session (requires admin)
  DELETE /api/v1/admin/delete          -- delete own account; revokes every session (requires admin)

Security:
  POST /admin/login is rate-limited per IP (LOGIN_RATE_LIMIT).
  Wrong password and unknown email produce the same 404 and message;
  find_by_credentials() equalizes the bcrypt work for both.
  Cache-Control: no-store on login responses.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import LOGIN_RATE_LIMIT, limiter
from api.models import (
    AdminLoginResponse,
    AdminResponse,
    AdminSignup,
    AdminUpdate,
    LoginRequest,
    MessageResponse,
    PasswordUpdate,
)
from auth.dependencies import AuthContext, require_admin
from auth.models import Admin
from auth.sessions import SessionService
from auth.store import AdminStore

router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/admin/signup", response_model=AdminResponse, status_code=201)
def admin_signup(request: Request, body: AdminSignup) -> AdminResponse:
    """Create an administrator. 409 if the email or username is already taken."""
    store: AdminStore = request.app.state.admin_store
    admin = store.create(
        Admin(
            first_name=body.first_name,
            last_name=body.last_name,
            username=body.username,
            email=body.email,
        ),
        body.password,
    )
    return AdminResponse.from_admin(admin)


@limiter.limit(LOGIN_RATE_LIMIT)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/admin/login", response_model=AdminLoginResponse)
def admin_login(request: Request, response: Response, body: LoginRequest) -> AdminLoginResponse:
    """Exchange email and password for a bearer token bound to this administrator."""
    store: AdminStore = request.app.state.admin_store
    sessions: SessionService = request.app.state.admin_sessions
    admin = store.find_by_credentials(body.email, body.password)
    token = sessions.issue(admin)
    response.headers["Cache-Control"] = "no-store"
    return AdminLoginResponse(
        access_token=token,
        expires_in=sessions.expire_seconds,
        admin=AdminResponse.from_admin(admin),
    )


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.post("/admin/logout", response_model=MessageResponse)
def admin_logout(request: Request, ctx: AuthContext = Depends(require_admin)) -> MessageResponse:
    request.app.state.admin_sessions.revoke_one(ctx.principal.id, ctx.token)
    return MessageResponse(status=200, message="Admin successfully logged out")


@router.post("/admin/logoutAll", response_model=MessageResponse)
def admin_logout_all(request: Request, ctx: AuthContext = Depends(require_admin)) -> MessageResponse:
    request.app.state.admin_sessions.revoke_all(ctx.principal.id)
    return MessageResponse(status=200, message="Admin successfully logged out of all devices")


@router.get("/admin/profile", response_model=AdminResponse)
def admin_profile(ctx: AuthContext = Depends(require_admin)) -> AdminResponse:
    return AdminResponse.from_admin(ctx.principal)


@router.patch("/admin/updateInfo", response_model=AdminResponse)
def admin_update_info(request: Request, body: AdminUpdate, ctx: AuthContext = Depends(require_admin)) -> AdminResponse:
    """Partial profile update.

    Changing the username changes the identity embedded in outstanding
    tokens, so every existing session stops validating and the
    administrator must log in again.
    """
    store: AdminStore = request.app.state.admin_store
    admin = store.update_profile(ctx.principal.id, **body.model_dump(exclude_none=True))
    return AdminResponse.from_admin(admin)


@router.patch("/admin/updatePassword", response_model=MessageResponse)
def admin_update_password(
    request: Request, body: PasswordUpdate, ctx: AuthContext = Depends(require_admin)
) -> MessageResponse:
    store: AdminStore = request.app.state.admin_store
    store.update_password(ctx.principal.id, body.password)
    return MessageResponse(status=200, message="Password updated. Please log in again")


@router.delete("/admin/delete", response_model=MessageResponse)
def admin_delete(request: Request, ctx: AuthContext = Depends(require_admin)) -> MessageResponse:
    store: AdminStore = request.app.state.admin_store
    store.delete(ctx.principal.id)
    return MessageResponse(status=200, message="Admin account deleted")
