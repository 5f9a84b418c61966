"""Unit of Work contract shared by the writer and read-only implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from todo_api.repositories import TodoRepository, UserRepository


class UnitOfWork(ABC):
    """
    Transactional boundary for one service call.

    Both repositories share the session of the unit, so user and todo
    changes made inside one ``with`` block land in the same transaction.
    """

    users: UserRepository
    todos: TodoRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
