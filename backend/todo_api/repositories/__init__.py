"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from todo_api.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from todo_api.repositories.todo import TodoRepository
from todo_api.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "Page",
    "Pagination",
    "apply_sorting",
    "paginate_select",
    "TodoRepository",
    "UserRepository",
]
