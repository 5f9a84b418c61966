"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or
HTTP. They are the stable contract between repositories, token handling and
application services.

Rendering into the HTTP error envelope happens in ``todo_api/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint. SQLite
        reports the column instead of the constraint, so ``users.email``
        style fragments derived from the name are accepted as well.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    # uq_<table>_<column> -> "<table>.<column>" (SQLite wording)
    parts = constraint_name.lower().split("_", 2)
    if len(parts) == 3 and parts[0] == "uq":
        return f"{parts[1]}.{parts[2]}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, token handling or services.
    - The HTTP boundary maps each subclass onto a status code.
    """


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Wrong email/password pair, or a structurally broken access token."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class TokenExpiredError(ServiceError):
    """Expired token, or a refresh token that is no longer the active one."""

    def __init__(self, message: str = "Token has expired") -> None:
        super().__init__(message)


class TokenInvalidError(ServiceError):
    """Missing, malformed or wrongly signed token."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """Authenticated caller acting on a resource it does not own."""

    def __init__(self, message: str = "You can only modify your own account") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Persistence
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class RecordNotFoundError(ServiceError):
    """
    Raised when an entity is absent or not owned by the caller.

    :param entity: Entity name (e.g., "Todo").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} with identifier {self.key} not found"


@dataclass(slots=True)
class UniqueConstraintError(ServiceError):
    """
    Raised when a unique field collides with an existing row.

    :param field: Public name of the duplicated field (e.g., "email").
    :type field: str
    """

    field: str

    def __str__(self) -> str:
        return f"{self.field} already exists"


class ServiceValidationError(ServiceError):
    """
    Input rejected by a service-level rule.

    :param message: Summary for clients.
    :param errors: Optional field → messages mapping.
    """

    def __init__(self, message: str = "Validation error", errors: dict[str, Any] | None = None):
        super().__init__(message)
        self.errors = errors or {}
