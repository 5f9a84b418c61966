"""
TodoService
===========

Owner-scoped todo use cases:

- CRUD where a todo owned by someone else behaves exactly like a missing one.
- Filtered, sorted, paginated listings with read-through caching.
- Completion statistics with read-through caching.
- All-or-nothing batch update/delete.

Every successful write invalidates the owner's cached listings and
statistics, after the transaction commits.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from todo_api.models.todo import Todo, check_description, check_title
from todo_api.repositories.todo import TodoRepository
from todo_api.services._shared.base import BaseService
from todo_api.services._shared.errors import RecordNotFoundError, ServiceValidationError
from todo_api.services._shared.ports import CacheStore
from todo_api.services.todos import cache as todo_cache
from todo_api.services.todos.dto import (
    BatchResultOut,
    TodoCreateIn,
    TodoOut,
    TodoPageOut,
    TodoQueryIn,
    TodoStatsOut,
    TodoUpdateIn,
)

log = logging.getLogger(__name__)

ENTITY = "Todo"


class TodoService(BaseService):
    """
    Application service for the ``Todo`` aggregate.

    :param cache: Cache used for listings/statistics; a disabled store makes
        every read hit the database.
    """

    def __init__(self, *, cache: CacheStore) -> None:
        self.cache = cache

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _to_out(todo: Todo) -> TodoOut:
        return TodoOut(
            id=todo.id,
            user_id=todo.user_id,
            title=todo.title,
            description=todo.description,
            completed=todo.completed,
            created_at=todo.created_at,
            updated_at=todo.updated_at,
        )

    @staticmethod
    def _checked(changes: Mapping[str, Any]) -> dict[str, Any]:
        """Run model-level field checks; bulk updates bypass ``@validates``."""
        clean = dict(changes)
        try:
            if "title" in clean:
                clean["title"] = check_title(clean["title"])
            if "description" in clean:
                clean["description"] = check_description(clean["description"])
        except ValueError as exc:
            raise ServiceValidationError(str(exc)) from exc
        if "completed" in clean and not isinstance(clean["completed"], bool):
            raise ServiceValidationError("Completed must be a boolean.")
        return clean

    @staticmethod
    def _require_all(ids: list[int], found: set[int]) -> None:
        """Raise for the first id of ``ids`` absent from ``found``."""
        for todo_id in ids:
            if todo_id not in found:
                raise RecordNotFoundError(ENTITY, todo_id)

    def _invalidate(self, user_id: int) -> None:
        todo_cache.invalidate_user(self.cache, user_id)

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def create(self, dto: TodoCreateIn, user_id: int) -> TodoOut:
        """
        Create a todo owned by ``user_id``.

        :raises ServiceValidationError: On a blank/oversized title or description.
        :raises RecordNotFoundError: When the owner account no longer exists.
        """
        with self.rw_uow() as uow:
            repo: TodoRepository = uow.todos
            if uow.users.get(user_id) is None:
                raise RecordNotFoundError("User", user_id)
            try:
                todo = Todo(
                    user_id=user_id,
                    title=dto.title,
                    description=dto.description,
                    completed=dto.completed,
                )
            except ValueError as exc:
                raise ServiceValidationError(str(exc)) from exc
            repo.add(todo)
            out = self._to_out(todo)

        self._invalidate(user_id)
        return out

    def update(self, todo_id: int, user_id: int, dto: TodoUpdateIn) -> TodoOut:
        """
        Apply a partial update to an owned todo.

        :raises RecordNotFoundError: When ``(todo_id, user_id)`` does not exist.
        """
        changes = self._checked(dto.changes)
        with self.rw_uow() as uow:
            repo: TodoRepository = uow.todos
            todo = repo.get_owned(todo_id, user_id)
            if todo is None:
                raise RecordNotFoundError(ENTITY, todo_id)
            repo.assign_updates(todo, changes)
            out = self._to_out(todo)

        self._invalidate(user_id)
        return out

    def remove(self, todo_id: int, user_id: int) -> dict[str, bool]:
        """
        Delete an owned todo.

        :returns: ``{"success": True}``.
        :raises RecordNotFoundError: When ``(todo_id, user_id)`` does not exist.
        """
        with self.rw_uow() as uow:
            repo: TodoRepository = uow.todos
            todo = repo.get_owned(todo_id, user_id)
            if todo is None:
                raise RecordNotFoundError(ENTITY, todo_id)
            repo.delete(todo)

        self._invalidate(user_id)
        return {"success": True}

    def update_many(self, ids: Iterable[int], dto: TodoUpdateIn, user_id: int) -> BatchResultOut:
        """
        Apply the same partial update to several owned todos atomically.

        The ownership check locks the matched rows and shares one transaction
        with the update. If any id is missing (or foreign), or disappears
        before the write, nothing is changed.

        :raises RecordNotFoundError: For the first id not owned by ``user_id``.
        """
        wanted = list(dict.fromkeys(ids))
        changes = self._checked(dto.changes)
        with self.rw_uow() as uow:
            repo: TodoRepository = uow.todos
            self._require_all(wanted, repo.owned_ids(wanted, user_id))
            # rows that vanished after the check abort the whole batch
            self._require_all(wanted, repo.update_owned(wanted, user_id, changes))

        self._invalidate(user_id)
        return BatchResultOut(count=len(wanted))

    def delete_many(self, ids: Iterable[int], user_id: int) -> BatchResultOut:
        """
        Delete several owned todos atomically.

        :raises RecordNotFoundError: For the first id not owned by ``user_id``.
        """
        wanted = list(dict.fromkeys(ids))
        with self.rw_uow() as uow:
            repo: TodoRepository = uow.todos
            self._require_all(wanted, repo.owned_ids(wanted, user_id))
            self._require_all(wanted, repo.delete_owned(wanted, user_id))

        self._invalidate(user_id)
        return BatchResultOut(count=len(wanted))

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def find_all(self, query: TodoQueryIn, user_id: int) -> TodoPageOut:
        """
        List the caller's todos.

        Served from ``todos:{user_id}:{query}`` when cached; otherwise read
        from the database and cached for five minutes.
        """
        q = query.normalized()
        key = todo_cache.listing_key(user_id, q)

        cached = todo_cache.read_page(self.cache, key)
        if cached is not None:
            return cached

        pagination = self.ensure_pagination(page=q.page, limit=q.limit, sort=[q.sort_token])
        with self.ro_uow() as uow:
            repo: TodoRepository = uow.todos
            page = repo.search(user_id, pagination, search=q.search, completed=q.completed)
            out = TodoPageOut(
                items=[self._to_out(t) for t in page.items],
                total=page.total,
                page=page.page,
                limit=page.limit,
            )

        todo_cache.write_page(self.cache, key, out)
        return out

    def find_one(self, todo_id: int, user_id: int) -> TodoOut:
        """
        :raises RecordNotFoundError: When ``(todo_id, user_id)`` does not exist.
        """
        with self.ro_uow() as uow:
            repo: TodoRepository = uow.todos
            todo = repo.get_owned(todo_id, user_id)
            if todo is None:
                raise RecordNotFoundError(ENTITY, todo_id)
            return self._to_out(todo)

    def get_statistics(self, user_id: int) -> TodoStatsOut:
        """Return ``total/completed/pending/completionRate`` for the caller."""
        cached = todo_cache.read_stats(self.cache, user_id)
        if cached is not None:
            return cached

        with self.ro_uow() as uow:
            repo: TodoRepository = uow.todos
            total, completed = repo.counts(user_id)

        stats = TodoStatsOut.from_counts(total, completed)
        todo_cache.write_stats(self.cache, user_id, stats)
        return stats
