"""
DTOs for UserService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegisterIn:
    """
    Input DTO for user registration.

    :param email: Login email (trimmed, case preserved).
    :type email: str
    :param name: Display name.
    :type name: str
    :param password: Raw password to be hashed by the model.
    :type password: str
    """

    email: str
    name: str
    password: str


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Input DTO for a partial profile update.

    :param email: Optional new email.
    :type email: str | None
    :param name: Optional new display name.
    :type name: str | None
    :param password: Optional new raw password (re-hashed).
    :type password: str | None
    """

    email: str | None = None
    name: str | None = None
    password: str | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe user representation. Never carries the password hash.
    """

    id: int
    email: str
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class UserListOut:
    """
    Page of users.

    :param items: Users in the current page.
    :param total: Total number of users.
    :param page: 1-based page number.
    :param limit: Page size.
    """

    items: list[UserPublicOut]
    total: int
    page: int
    limit: int
