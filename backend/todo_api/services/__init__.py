"""Service layer public API.

This package exposes the essential building blocks for the service layer so
that callers can import from :mod:`todo_api.services` without knowing the
internal structure.

Re-exports
----------
- Base primitives (from ``todo_api.services._shared.base``)
    * :class:`BaseService`

- Token handling (from ``todo_api.services.tokens``)
    * :class:`TokenService`
    * DTOs: :class:`TokenConfig`, :class:`TokenClaims`, :class:`TokenPairOut`

- Authentication (from ``todo_api.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`LoginOut`, :class:`RefreshIn`

- Users (from ``todo_api.services.users``)
    * :class:`UserService`
    * DTOs: :class:`UserRegisterIn`, :class:`UserUpdateIn`,
      :class:`UserPublicOut`, :class:`UserListOut`

- Todos (from ``todo_api.services.todos``)
    * :class:`TodoService`
    * DTOs: :class:`TodoCreateIn`, :class:`TodoUpdateIn`, :class:`TodoQueryIn`,
      :class:`TodoOut`, :class:`TodoPageOut`, :class:`TodoStatsOut`,
      :class:`BatchResultOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .auth.dto import LoginIn, LoginOut, RefreshIn
from .auth.service import AuthService
from .todos.dto import (
    BatchResultOut,
    TodoCreateIn,
    TodoOut,
    TodoPageOut,
    TodoQueryIn,
    TodoStatsOut,
    TodoUpdateIn,
)
from .todos.service import TodoService
from .tokens.dto import TokenClaims, TokenConfig, TokenPairOut
from .tokens.service import TokenService
from .users.dto import UserListOut, UserPublicOut, UserRegisterIn, UserUpdateIn
from .users.service import UserService

__all__ = [
    # Base
    "BaseService",
    # Tokens
    "TokenService",
    "TokenConfig",
    "TokenClaims",
    "TokenPairOut",
    # Auth
    "AuthService",
    "LoginIn",
    "LoginOut",
    "RefreshIn",
    # Users
    "UserService",
    "UserRegisterIn",
    "UserUpdateIn",
    "UserPublicOut",
    "UserListOut",
    # Todos
    "TodoService",
    "TodoCreateIn",
    "TodoUpdateIn",
    "TodoQueryIn",
    "TodoOut",
    "TodoPageOut",
    "TodoStatsOut",
    "BatchResultOut",
]
