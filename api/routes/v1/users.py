"""
api/routes/v1/users.py -- User account and session REST endpoints.

Routes:
  POST   /api/v1/signup          -- create a user; 201
  POST   /api/v1/login           -- email/password login; returns bearer token
  POST   /api/v1/logout          -- revoke the token used for this request
  POST   /api/v1/logoutAll       -- revoke every token of this user
  GET    /api/v1/profile         -- current user (requires user)
  PATCH  /api/v1/updateInfo      -- update name, phone, company or position (requires user)
  PATCH  /api/v1/updatePassword  -- change password; revokes every session (requires user)
  DELETE /api/v1/delete          -- soft-delete own account; revokes every session (requires user)

Mirrors api/routes/v1/admins.py for the user principal kind. The two kinds
never share a SessionService, so an administrator token is rejected here.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import LOGIN_RATE_LIMIT, limiter
from api.models import (
    LoginRequest,
    MessageResponse,
    PasswordUpdate,
    UserLoginResponse,
    UserResponse,
    UserSignup,
    UserUpdate,
)
from auth.dependencies import AuthContext, require_user
from auth.models import User
from auth.sessions import SessionService
from auth.store import UserStore

router = APIRouter()


@router.post("/signup", response_model=UserResponse, status_code=201)
def user_signup(request: Request, body: UserSignup) -> UserResponse:
    """Create a user. 409 if the email is already registered."""
    store: UserStore = request.app.state.user_store
    user = store.create(
        User(
            full_name=body.full_name,
            email=body.email,
            phone_no=body.phone_no,
            company_name=body.company_name,
            position=body.position,
        ),
        body.password,
    )
    return UserResponse.from_user(user)


@limiter.limit(LOGIN_RATE_LIMIT)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/login", response_model=UserLoginResponse)
def user_login(request: Request, response: Response, body: LoginRequest) -> UserLoginResponse:
    store: UserStore = request.app.state.user_store
    sessions: SessionService = request.app.state.user_sessions
    user = store.find_by_credentials(body.email, body.password)
    token = sessions.issue(user)
    response.headers["Cache-Control"] = "no-store"
    return UserLoginResponse(
        access_token=token,
        expires_in=sessions.expire_seconds,
        user=UserResponse.from_user(user),
    )


@router.post("/logout", response_model=MessageResponse)
def user_logout(request: Request, ctx: AuthContext = Depends(require_user)) -> MessageResponse:
    request.app.state.user_sessions.revoke_one(ctx.principal.id, ctx.token)
    return MessageResponse(status=200, message="User successfully logged out")


@router.post("/logoutAll", response_model=MessageResponse)
def user_logout_all(request: Request, ctx: AuthContext = Depends(require_user)) -> MessageResponse:
    request.app.state.user_sessions.revoke_all(ctx.principal.id)
    return MessageResponse(status=200, message="User successfully logged out of all devices")


@router.get("/profile", response_model=UserResponse)
def user_profile(ctx: AuthContext = Depends(require_user)) -> UserResponse:
    return UserResponse.from_user(ctx.principal)


@router.patch("/updateInfo", response_model=UserResponse)
def user_update_info(request: Request, body: UserUpdate, ctx: AuthContext = Depends(require_user)) -> UserResponse:
    store: UserStore = request.app.state.user_store
    user = store.update_profile(ctx.principal.id, **body.model_dump(exclude_none=True))
    return UserResponse.from_user(user)


@router.patch("/updatePassword", response_model=MessageResponse)
def user_update_password(
    request: Request, body: PasswordUpdate, ctx: AuthContext = Depends(require_user)
) -> MessageResponse:
    store: UserStore = request.app.state.user_store
    store.update_password(ctx.principal.id, body.password)
    return MessageResponse(status=200, message="Password updated. Please log in again")


@router.delete("/delete", response_model=MessageResponse)
def user_delete(request: Request, ctx: AuthContext = Depends(require_user)) -> MessageResponse:
    store: UserStore = request.app.state.user_store
    store.delete(ctx.principal.id)
    return MessageResponse(status=200, message="User account deleted")
