"""User repository for persistence and credential lookups."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from todo_api.models.user import User
from todo_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never issues tokens; it only stores and looks up credentials.
    """

    model = User

    def _sortable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "name": User.name,
            "createdAt": User.created_at,
        }

    def _updatable_fields(self):
        """Publicly allowed updatable fields (password goes through the setter)."""
        return {"email", "name", "password"}

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by exact (trimmed) email.

        :param email: Email address as stored.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str, *, exclude_id: int | None = None) -> bool:
        """Return ``True`` when another user already owns ``email``.

        :param email: Email address to search.
        :param exclude_id: User id ignored by the check (self-update).
        """
        stmt = select(User.id).where(User.email == email.strip())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None
