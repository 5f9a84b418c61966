"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from todo_api.core.extensions import get_cache
from todo_api.infra.jwt.pyjwt_token_provider import PyJWTTokenProvider
from todo_api.infra.redis.cached_refresh_token_store import CachedRefreshTokenStore
from todo_api.schemas.common import PaginationQuerySchema
from todo_api.services._shared.errors import TokenInvalidError
from todo_api.services.auth.service import AuthService
from todo_api.services.todos.service import TodoService
from todo_api.services.tokens.dto import TokenConfig
from todo_api.services.tokens.service import TokenService
from todo_api.services.users.service import UserService

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


# ------------------------------ Service wiring -------------------------------


def build_token_service() -> TokenService:
    """Wire a :class:`TokenService` from the current app's config and cache."""

    cfg = current_app.config
    return TokenService(
        token_provider=PyJWTTokenProvider(algorithm=cfg.get("JWT_ALGORITHM", "HS256")),
        refresh_store=CachedRefreshTokenStore(cache=get_cache()),
        config=TokenConfig(
            access_secret=cfg["JWT_SECRET_KEY"],
            refresh_secret=cfg["JWT_REFRESH_SECRET_KEY"],
        ),
    )


def build_auth_service() -> AuthService:
    return AuthService(token_service=build_token_service())


def build_user_service() -> UserService:
    cache = get_cache()
    return UserService(cache=cache, refresh_store=CachedRefreshTokenStore(cache=cache))


def build_todo_service() -> TodoService:
    return TodoService(cache=get_cache())


# ------------------------------ Request parsing ------------------------------


def parse_pagination(default_limit: int = 10, max_limit: int = 100) -> tuple[int, int]:
    """Parse ``page``/``limit`` from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return data["page"], data["limit"]


def json_body() -> dict[str, Any]:
    """Return the JSON body or an empty mapping (schemas report missing fields)."""

    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def bearer_token() -> str:
    """Extract the token from ``Authorization: Bearer <token>``.

    :raises TokenInvalidError: When the header is missing or malformed.
    """

    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        raise TokenInvalidError()
    token = header[len(BEARER_PREFIX) :].strip()
    if not token:
        raise TokenInvalidError()
    return token


def current_user_id() -> int:
    """Return the id resolved by :func:`require_auth` for this request."""

    return int(g.current_user_id)


# ------------------------------- Decorators ----------------------------------


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token.

    The verified identity is exposed as ``g.current_user_id`` and
    ``g.current_user_email``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        claims = build_auth_service().verify_token(bearer_token())
        g.current_user_id = claims.user_id
        g.current_user_email = claims.email
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def empty_response(status: int = 204) -> Response:
    """Return a body-less response (``204 No Content`` by default)."""

    return Response(status=status)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
