"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint

from todo_api.api.deps import (
    build_auth_service,
    build_user_service,
    current_user_id,
    json_body,
    json_response,
    require_auth,
    timing,
)
from todo_api.schemas import (
    LoginResponseSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from todo_api.services.auth.dto import LoginIn, RefreshIn
from todo_api.services.users.dto import UserRegisterIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
user_schema = UserSchema()
login_response_schema = LoginResponseSchema()
token_schema = TokenPairSchema()


@bp.post("/register")
@timing
def register():
    """Register a new user and return the created representation."""

    payload = register_schema.load(json_body())
    user = build_user_service().register(UserRegisterIn(**payload))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(json_body())
    result = build_auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    return json_response({"data": login_response_schema.dump(result)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token."""

    data = refresh_schema.load(json_body())
    pair = build_auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke the caller's refresh token."""

    build_auth_service().logout(current_user_id())
    return json_response({"data": {"success": True}})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    user = build_user_service().get_user(current_user_id())
    return json_response({"data": user_schema.dump(user)})
