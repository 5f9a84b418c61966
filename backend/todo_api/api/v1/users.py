"""User endpoints."""

from __future__ import annotations

from flask import Blueprint

from todo_api.api.deps import (
    build_user_service,
    current_user_id,
    empty_response,
    json_body,
    json_response,
    parse_pagination,
    require_auth,
    timing,
)
from todo_api.schemas import RegisterSchema, UserSchema, UserUpdateSchema, build_meta
from todo_api.services.users.dto import UserRegisterIn, UserUpdateIn

bp = Blueprint("users", __name__, url_prefix="/users")

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_create_schema = RegisterSchema()
user_update_schema = UserUpdateSchema()


@bp.get("")
@require_auth
@timing
def list_users():
    """Return paginated users."""

    page, limit = parse_pagination()
    result = build_user_service().list_users(page=page, limit=limit)
    data = user_list_schema.dump(result.items)
    meta = build_meta(total=result.total, page=result.page, limit=result.limit)
    return json_response({"data": data, "meta": meta})


@bp.post("")
@require_auth
@timing
def create_user():
    """Create a user account on behalf of an authenticated caller."""

    payload = user_create_schema.load(json_body())
    user = build_user_service().register(UserRegisterIn(**payload))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.get("/<int:user_id>")
@require_auth
@timing
def get_user(user_id: int):
    """Return a single user."""

    user = build_user_service().get_user(user_id)
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/<int:user_id>")
@require_auth
@timing
def update_user(user_id: int):
    """Update the caller's own profile."""

    payload = user_update_schema.load(json_body())
    user = build_user_service().update_user(current_user_id(), user_id, UserUpdateIn(**payload))
    return json_response({"data": user_schema.dump(user)})


@bp.delete("/<int:user_id>")
@require_auth
@timing
def delete_user(user_id: int):
    """Delete the caller's own account and its todos."""

    build_user_service().delete_user(current_user_id(), user_id)
    return empty_response()
