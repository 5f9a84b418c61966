"""Generic repository base and query utilities for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Strongly-typed pagination and sorting helpers.
- Safe sorting with a whitelist mapping (prevents SQL injection).
- Deterministic pagination (adds a primary-key tiebreaker).
- Safe update helpers with per-repository updatable-field whitelists.
- No business logic, no commit/rollback: Services own transactions.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from todo_api.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


# ------------------------------- Pagination ----------------------------------


@dataclass(slots=True)
class Pagination:
    """Pagination input parameters.

    :param page: 1-based page number (validated to be ``>= 1``).
    :type page: int
    :param limit: Page size (validated to be ``>= 1``).
    :type limit: int
    :param sort: Public sort tokens (e.g., ``["-created_at", "name"]``).
    :type sort: list[str]
    """

    page: int
    limit: int
    sort: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Page(Generic[E]):
    """Result page with metadata.

    :param items: Listed entities in the current page.
    :type items: Sequence[E]
    :param total: Total item count for the unpaginated query.
    :type total: int
    :param page: 1-based current page number.
    :type page: int
    :param limit: Page size.
    :type limit: int
    """

    items: Sequence[E]
    total: int
    page: int
    limit: int


# ----------------------------- Sorting utilities -----------------------------


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Parse public sort tokens into ``(field, is_desc)`` tuples.

    :param raw: Public tokens like ``["-created_at", "name"]``.
    :type raw: Iterable[str]
    :returns: List of ``(field_name, is_desc)`` tokens.
    :rtype: list[tuple[str, bool]]
    """
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        is_desc = token.startswith("-")
        name = (token[1:] if is_desc else token).strip()
        if name:
            parsed.append((name, is_desc))
    return parsed


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Apply safe ``ORDER BY`` clauses based on a whitelist mapping.

    Unknown sort tokens are ignored silently. The primary key is appended as
    a final tiebreaker, in the direction of the first recognised token, so
    "newest first" listings stay newest first among equal timestamps.

    :param stmt: Base selectable.
    :param sortable_fields: Public field → SQLAlchemy attribute mapping.
    :param tokens: Public sort tokens (e.g., ``["-created_at"]``).
    :param pk_attr: Primary-key attribute used as a tiebreaker.
    :returns: Modified select with ``ORDER BY`` clauses.
    """
    orders: list[Any] = []
    tiebreak_desc = False
    for name, is_desc in parse_sort_tokens(tokens):
        col = sortable_fields.get(name)
        if isinstance(col, InstrumentedAttribute):
            if not orders:
                tiebreak_desc = is_desc
            orders.append(col.desc() if is_desc else col.asc())

    if pk_attr is not None:
        orders.append(pk_attr.desc() if tiebreak_desc else pk_attr.asc())

    return stmt.order_by(*orders) if orders else stmt


# --------------------------- Pagination execution ----------------------------


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
) -> tuple[list[Any], int]:
    """Execute a select with ``(page-1)*limit`` offset and a total count.

    The statement's ``ORDER BY`` is stripped for the ``COUNT`` so the total
    is computed under the same filter, without pagination or sorting.

    :returns: Tuple of ``(items, total)``.
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = int(session.execute(count_stmt).scalar_one())

    sliced = stmt.limit(limit).offset((page - 1) * limit)
    items = list(session.execute(sliced).scalars().all())
    return items, total


# ------------------------------ Base repository ------------------------------


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define ``model`` and MAY override ``_sortable_fields``
    and ``_updatable_fields``.

    This class NEVER opens, commits or rolls back transactions. Services
    orchestrate use cases and own transaction boundaries.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared across the Unit of Work scope; falls
            back to the Flask-scoped session.
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session or the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist mapping of public sort keys to model attributes."""
        return {}

    def _updatable_fields(self) -> set[str]:
        """Whitelist of attribute names that can be assigned on update."""
        return set()

    def _sanitize_update_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Return only whitelisted update keys.

        :raises ValueError: If unknown keys are present.
        """
        allowed = self._updatable_fields()
        unknown = [k for k in fields if k not in allowed]
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return dict(fields)

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush to materialize the PK."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        result = self.session.execute(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, result.scalars().first())

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any]) -> E:
        """Assign only whitelisted keys to ``instance`` and flush.

        ``setattr`` is used so ``@validates`` hooks on the model run.
        """
        for key, value in self._sanitize_update_fields(fields).items():
            setattr(instance, key, value)
        self.flush()
        return instance

    # ------------------------------- Listing ---------------------------------

    def paginate(self, pagination: Pagination, stmt: Select[Any] | None = None) -> Page[E]:
        """Paginate ``stmt`` (default: all rows) with whitelisted sorting.

        :param pagination: Page, limit and sort tokens.
        :param stmt: Pre-filtered select over :attr:`model`.
        :returns: :class:`Page` with items and metadata.
        """
        base = stmt if stmt is not None else select(self.model)
        ordered = apply_sorting(
            base, self._sortable_fields(), pagination.sort, pk_attr=self._pk_attr()
        )
        items, total = paginate_select(
            self.session, ordered, page=pagination.page, limit=pagination.limit
        )
        return Page(
            items=cast(list[E], items),
            total=total,
            page=pagination.page,
            limit=pagination.limit,
        )
