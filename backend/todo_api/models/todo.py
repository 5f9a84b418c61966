"""Todo model: a task owned by exactly one user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from todo_api.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def check_title(value: str) -> str:
    """
    Reject blank or oversized titles.

    Shared by the ORM validator and bulk updates, which bypass ``@validates``.

    :raises ValueError: If the title is empty or longer than 100 chars.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Title is required.")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters.")
    return value


def check_description(value: str | None) -> str | None:
    if value is not None and len(value) > DESCRIPTION_MAX_LENGTH:
        raise ValueError(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters.")
    return value


class Todo(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A user's task.

    Fields
    ------
    user_id : int
        Owning user. Every query must filter on it.
    title : str
        Required, at most 100 characters.
    description : str | None
        Optional, at most 500 characters.
    completed : bool
        Completion flag, ``False`` on creation.
    """

    __tablename__ = "todos"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH))
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    user: Mapped[User] = relationship(back_populates="todos")

    __table_args__ = (
        Index("ix_todos_user_id", "user_id"),
        Index("ix_todos_user_id_created_at", "user_id", "created_at"),
    )

    @validates("title")
    def _validate_title(self, key: str, value: str) -> str:
        return check_title(value)

    @validates("description")
    def _validate_description(self, key: str, value: str | None) -> str | None:
        return check_description(value)
