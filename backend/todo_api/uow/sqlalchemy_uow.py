"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from todo_api.core.extensions import db
from todo_api.repositories import TodoRepository, UserRepository
from todo_api.uow.base import UnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.todos = TodoRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Everything done through ``uow.users`` / ``uow.todos`` inside the ``with``
    block commits together, or not at all.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    - Owns a fresh transaction when the session is idle and rolls it back on
      exit; otherwise attaches to the running transaction untouched.
    - Blocks ORM flushes of new/dirty/deleted objects while open.
    - Applies ``SET TRANSACTION READ ONLY`` on PostgreSQL when owning.
    - Disallows ``commit()``.
    """

    def __init__(self, *, enforce_db_readonly: bool = True) -> None:
        super().__init__(session=db.session)
        self.enforce_db_readonly = enforce_db_readonly
        self._txn: SessionTransaction | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn = None
        try:
            self._txn = self.session.begin()
        except InvalidRequestError:
            # A transaction is already running (autobegin, outer fixture):
            # read inside it without taking ownership.
            pass

        event.listen(self.session, "before_flush", self._block_flush)

        if self._txn is not None and self.enforce_db_readonly:
            conn = self.session.connection()
            if conn.dialect.name == "postgresql":
                try:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
                except SQLAlchemyError as exc:
                    log.warning("SET TRANSACTION READ ONLY failed (%s); guards only.", exc)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                self._txn = None
        finally:
            with suppress(InvalidRequestError):
                event.remove(self.session, "before_flush", self._block_flush)

    @staticmethod
    def _block_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
