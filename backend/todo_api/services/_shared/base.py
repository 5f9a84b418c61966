from __future__ import annotations

from todo_api.repositories.base import Pagination
from todo_api.services._shared.errors import ForbiddenError
from todo_api.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer shared validation helpers (pagination, ownership).
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    """

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=enforce_db_readonly)

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        sort: list[str] | None = None,
    ) -> Pagination:
        """
        Build a Pagination value object with basic clamping.

        :param page: 1-based page number (defaults to 1).
        :type page: int | None
        :param limit: Page size (defaults to 10, capped at 100).
        :type limit: int | None
        :param sort: Sort tokens like ``["-createdAt"]``.
        :type sort: list[str] | None
        :returns: Pagination instance.
        :rtype: Pagination
        """
        page = max(1, int(page or DEFAULT_PAGE))
        limit = min(MAX_LIMIT, max(1, int(limit or DEFAULT_LIMIT)))
        return Pagination(page=page, limit=limit, sort=list(sort or []))

    # --------------------------- AuthZ --------------------------------------

    def ensure_owner(self, actor_id: int | None, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the current actor is the resource owner.

        :param actor_id: Authenticated user id.
        :param owner_id: Expected owner id.
        :param msg: Optional custom error message.
        :raises ForbiddenError: If actor is not the owner.
        """
        if actor_id is None or actor_id != owner_id:
            raise ForbiddenError(msg) if msg else ForbiddenError()
