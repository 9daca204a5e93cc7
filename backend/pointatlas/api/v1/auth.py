"""Authentication endpoints backed by the session manager."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from pointatlas.api.deps import (
    get_session_manager,
    json_response,
    require_principal,
    timing,
    unwrap_or_raise,
)
from pointatlas.core.extensions import limiter
from pointatlas.schemas import (
    AuthResponseSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    UserSchema,
)
from pointatlas.services._shared.principal import Principal
from pointatlas.services.auth.dto import LoginIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
auth_schema = AuthResponseSchema()
user_schema = UserSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "10 per minute"))


@bp.post("/register")
@timing
def register():
    """Create an account and return its first session."""

    data = register_schema.load(request.get_json(silent=True) or {})
    result = get_session_manager().register(
        RegisterIn(
            email=data["email"],
            password=data["password"],
            display_name=data["display_name"],
        )
    )
    session = unwrap_or_raise(result)
    return json_response({"data": auth_schema.dump(session)}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_session_manager().login(LoginIn(email=data["email"], password=data["password"]))
    return json_response({"data": auth_schema.dump(unwrap_or_raise(result))})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token. The presented token stops working."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    result = get_session_manager().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": auth_schema.dump(unwrap_or_raise(result))})


@bp.post("/logout")
@require_principal
@timing
def logout(principal: Principal):
    """Revoke every refresh token of the caller."""

    unwrap_or_raise(get_session_manager().logout(principal.id))
    return json_response({"data": {"message": "Logged out successfully"}})


@bp.get("/me")
@require_principal
@timing
def me(principal: Principal):
    """Return the authenticated user."""

    user = unwrap_or_raise(get_session_manager().get_current_user(principal.id))
    return json_response({"data": user_schema.dump(user)})
