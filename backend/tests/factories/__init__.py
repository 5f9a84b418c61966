"""Factory Boy base wired to the per-test transactional session."""

from __future__ import annotations

import factory
from sqlalchemy.orm import Session


class SQLAlchemySession:
    """Holder for the session the ``session`` fixture opened for this test."""

    _session: Session | None = None

    @classmethod
    def set(cls, session: Session | None) -> None:
        cls._session = session

    @classmethod
    def get(cls) -> Session:
        """
        :raises RuntimeError: When a factory runs outside the ``session`` fixture.
        """
        if cls._session is None:
            raise RuntimeError("No factory session; request the 'session' fixture.")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Persist with ``flush`` so ids exist while the test transaction stays open."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"
