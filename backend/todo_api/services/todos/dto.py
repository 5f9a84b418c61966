"""
DTOs for TodoService.

Inputs are produced by the HTTP schemas; outputs are plain dataclasses that
can be rendered by the response schemas or serialized into the cache.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any

SORTABLE_FIELDS = ("createdAt", "title", "completed")
SORT_ORDERS = ("asc", "desc")

DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = "desc"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

UPDATABLE_FIELDS = frozenset({"title", "description", "completed"})

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TodoCreateIn:
    """
    Input DTO for creating a todo.

    :param title: Required title (1..100 chars).
    :type title: str
    :param description: Optional description (<= 500 chars).
    :type description: str | None
    :param completed: Initial completion flag.
    :type completed: bool
    """

    title: str
    description: str | None = None
    completed: bool = False


@dataclass(frozen=True, slots=True)
class TodoUpdateIn:
    """
    Partial update: only the keys present in ``changes`` are written.

    ``description`` may be explicitly set to ``None`` to clear it, which is
    why absence and ``None`` are kept apart.

    :param changes: Field name -> new value, restricted to
        ``title``, ``description`` and ``completed``.
    :type changes: Mapping[str, Any]
    """

    changes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown todo fields: {sorted(unknown)}")

    @classmethod
    def of(cls, **changes: Any) -> TodoUpdateIn:
        return cls(changes=dict(changes))


@dataclass(frozen=True, slots=True)
class TodoQueryIn:
    """
    Listing query.

    :param search: Case-insensitive substring over title/description.
    :param completed: Optional equality filter.
    :param page: 1-based page (default 1).
    :param limit: Page size (default 10).
    :param sort_by: One of ``createdAt``, ``title``, ``completed``.
    :param sort_order: ``asc`` or ``desc`` (default ``desc``).
    """

    search: str | None = None
    completed: bool | None = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = DEFAULT_SORT_ORDER

    def normalized(self) -> TodoQueryIn:
        """Return a copy with defaults applied and ``search`` trimmed."""
        search = self.search.strip() if self.search else None
        return replace(
            self,
            search=search or None,
            page=max(1, int(self.page or DEFAULT_PAGE)),
            limit=max(1, int(self.limit or DEFAULT_LIMIT)),
            sort_by=self.sort_by if self.sort_by in SORTABLE_FIELDS else DEFAULT_SORT_BY,
            sort_order=self.sort_order if self.sort_order in SORT_ORDERS else DEFAULT_SORT_ORDER,
        )

    @property
    def sort_token(self) -> str:
        """Repository sort token, e.g. ``"-createdAt"``."""
        return f"-{self.sort_by}" if self.sort_order == "desc" else self.sort_by

    def as_key_fragment(self) -> dict[str, Any]:
        """Public (camelCase) view of the query, used to build cache keys."""
        return {
            "completed": self.completed,
            "limit": self.limit,
            "page": self.page,
            "search": self.search,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order,
        }


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TodoOut:
    """Public todo representation."""

    id: int
    user_id: int
    title: str
    description: str | None
    completed: bool
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TodoOut:
        return cls(
            id=int(data["id"]),
            user_id=int(data["user_id"]),
            title=data["title"],
            description=data.get("description"),
            completed=bool(data["completed"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


@dataclass(frozen=True, slots=True)
class TodoPageOut:
    """
    One page of todos plus paging metadata.

    :param items: Todos in the current page.
    :param total: Number of todos matching the filter.
    :param page: 1-based page number.
    :param limit: Page size.
    """

    items: list[TodoOut]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TodoPageOut:
        return cls(
            items=[TodoOut.from_dict(item) for item in data["items"]],
            total=int(data["total"]),
            page=int(data["page"]),
            limit=int(data["limit"]),
        )


@dataclass(frozen=True, slots=True)
class TodoStatsOut:
    """
    Per-user completion statistics.

    :param total: Number of todos.
    :param completed: Number of completed todos.
    :param pending: ``total - completed``.
    :param completion_rate: Percentage in ``[0, 100]``; 0 when there are no todos.
    """

    total: int
    completed: int
    pending: int
    completion_rate: float

    @classmethod
    def from_counts(cls, total: int, completed: int) -> TodoStatsOut:
        rate = (completed / total) * 100 if total > 0 else 0
        return cls(
            total=total,
            completed=completed,
            pending=total - completed,
            completion_rate=rate,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TodoStatsOut:
        return cls(
            total=int(data["total"]),
            completed=int(data["completed"]),
            pending=int(data["pending"]),
            completion_rate=float(data["completion_rate"]),
        )


@dataclass(frozen=True, slots=True)
class BatchResultOut:
    """Number of rows touched by a batch command."""

    count: int
