"""Todo repository: owner-scoped queries, statistics and bulk writes."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, cast

from sqlalchemy import Select, case, delete, func, or_, select, update

from todo_api.models.todo import Todo
from todo_api.repositories.base import BaseRepository, Page, Pagination

LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


class TodoRepository(BaseRepository[Todo]):
    """Persistence-only repository for :class:`Todo`.

    Every method takes the owning ``user_id`` and folds it into the
    ``WHERE`` clause; a todo owned by someone else is indistinguishable from
    a missing one.
    """

    model = Todo

    def _sortable_fields(self):
        return {
            "createdAt": Todo.created_at,
            "title": Todo.title,
            "completed": Todo.completed,
        }

    def _updatable_fields(self):
        return {"title", "description", "completed"}

    # ------------------------------ Lookups ---------------------------------

    def _owned(self, user_id: int) -> Select[Any]:
        return select(Todo).where(Todo.user_id == user_id)

    def get_owned(self, todo_id: int, user_id: int) -> Todo | None:
        """Fetch a todo by ``(id, user_id)``."""
        stmt = self._owned(user_id).where(Todo.id == todo_id)
        return cast(Todo | None, self.session.execute(stmt).scalars().first())

    def owned_ids(self, ids: Iterable[int], user_id: int) -> set[int]:
        """Return the subset of ``ids`` that exist and belong to ``user_id``.

        The matched rows are locked (``FOR UPDATE``) until the transaction
        ends, so a batch write that follows sees the same rows.
        """
        wanted = list(ids)
        if not wanted:
            return set()
        stmt = (
            select(Todo.id)
            .where(Todo.user_id == user_id, Todo.id.in_(wanted))
            .with_for_update()
        )
        return set(self.session.execute(stmt).scalars().all())

    def search(
        self,
        user_id: int,
        pagination: Pagination,
        *,
        search: str | None = None,
        completed: bool | None = None,
    ) -> Page[Todo]:
        """
        List a user's todos with optional text and completion filters.

        :param user_id: Owner.
        :param pagination: Page, limit and a single sort token such as
            ``"-createdAt"``.
        :param search: Case-insensitive substring matched against title OR
            description.
        :param completed: Optional equality filter.
        :returns: Page of todos plus the total under the same filter.
        """
        stmt = self._owned(user_id)
        if completed is not None:
            stmt = stmt.where(Todo.completed == completed)
        if search:
            pattern = f"%{_escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    Todo.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Todo.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return self.paginate(pagination, stmt)

    def counts(self, user_id: int) -> tuple[int, int]:
        """Return ``(total, completed)`` for a user in a single query."""
        stmt = select(
            func.count(Todo.id),
            func.coalesce(func.sum(case((Todo.completed.is_(True), 1), else_=0)), 0),
        ).where(Todo.user_id == user_id)
        total, completed = self.session.execute(stmt).one()
        return int(total), int(completed)

    # ---------------------------- Bulk writes -------------------------------

    def update_owned(
        self, ids: Iterable[int], user_id: int, values: Mapping[str, Any]
    ) -> set[int]:
        """
        Apply ``values`` to every todo in ``ids`` owned by ``user_id``.

        :returns: Ids of the rows actually updated.
        """
        clean = self._sanitize_update_fields(values)
        wanted = list(ids)
        if not wanted:
            return set()
        if not clean:
            # nothing to change; report the rows that matched
            return self.owned_ids(wanted, user_id)
        stmt = (
            update(Todo)
            .where(Todo.user_id == user_id, Todo.id.in_(wanted))
            .values(**clean)
            .returning(Todo.id)
            .execution_options(synchronize_session=False)
        )
        return set(self.session.execute(stmt).scalars().all())

    def delete_owned(self, ids: Iterable[int], user_id: int) -> set[int]:
        """Delete every todo in ``ids`` owned by ``user_id``; return the deleted ids."""
        wanted = list(ids)
        if not wanted:
            return set()
        stmt = (
            delete(Todo)
            .where(Todo.user_id == user_id, Todo.id.in_(wanted))
            .returning(Todo.id)
            .execution_options(synchronize_session=False)
        )
        return set(self.session.execute(stmt).scalars().all())
