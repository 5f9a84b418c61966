"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginResponseSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
)
from .common import MetaSchema, PaginationQuerySchema, build_meta
from .todo import (
    BatchResultSchema,
    TodoBatchDeleteSchema,
    TodoBatchUpdateSchema,
    TodoCreateSchema,
    TodoQuerySchema,
    TodoSchema,
    TodoStatsSchema,
    TodoUpdateSchema,
)
from .user import UserSchema, UserUpdateSchema

__all__ = [
    "LoginSchema",
    "LoginResponseSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "PaginationQuerySchema",
    "MetaSchema",
    "build_meta",
    "TodoCreateSchema",
    "TodoUpdateSchema",
    "TodoQuerySchema",
    "TodoBatchUpdateSchema",
    "TodoBatchDeleteSchema",
    "TodoSchema",
    "TodoStatsSchema",
    "BatchResultSchema",
    "UserSchema",
    "UserUpdateSchema",
]
