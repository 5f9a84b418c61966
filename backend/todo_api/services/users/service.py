"""
UserService
===========

Application service for the ``User`` aggregate:

- Registration with email uniqueness.
- Public profile listing and retrieval.
- Self-service update and deletion of the caller's own account.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from todo_api.models.user import User
from todo_api.repositories.user import UserRepository
from todo_api.services._shared.base import BaseService
from todo_api.services._shared.errors import (
    RecordNotFoundError,
    ServiceValidationError,
    UniqueConstraintError,
    violates,
)
from todo_api.services._shared.ports import CacheStore, RefreshTokenStore
from todo_api.services.todos import cache as todo_cache
from todo_api.services.users.dto import (
    UserListOut,
    UserPublicOut,
    UserRegisterIn,
    UserUpdateIn,
)

log = logging.getLogger(__name__)

ENTITY = "User"


class UserService(BaseService):
    """
    Application service for the ``User`` aggregate.

    Responsibilities
    ----------------
    - Register users ensuring email uniqueness.
    - Retrieve and list public user data.
    - Update/delete only the caller's own account.
    """

    def __init__(self, *, cache: CacheStore, refresh_store: RefreshTokenStore) -> None:
        """
        :param cache: Cache holding the user's todo listings/statistics.
        :param refresh_store: Store whose entry is dropped on account deletion.
        """
        self.cache = cache
        self.refresh_store = refresh_store

    @staticmethod
    def _to_public(user: User) -> UserPublicOut:
        return UserPublicOut(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: UserRegisterIn) -> UserPublicOut:
        """
        Register a new user.

        :param dto: User registration input DTO.
        :type dto: UserRegisterIn
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises UniqueConstraintError: When the email is already registered.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if repo.exists_by_email(dto.email):
                raise UniqueConstraintError("email")

            try:
                user = repo.model(
                    email=dto.email,
                    name=dto.name,
                    password=dto.password,  # model hashes via setter
                )
            except ValueError as exc:
                raise ServiceValidationError(str(exc)) from exc

            try:
                repo.add(user)
            except IntegrityError as exc:
                # lost a race against a concurrent registration
                if violates(exc, "uq_users_email"):
                    raise UniqueConstraintError("email") from exc
                raise

            log.info("user.registered", extra={"user_id": user.id})
            return self._to_public(user)

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: int) -> UserPublicOut:
        """
        :raises RecordNotFoundError: If the user does not exist.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise RecordNotFoundError(ENTITY, user_id)
            return self._to_public(user)

    def list_users(self, *, page: int | None = None, limit: int | None = None) -> UserListOut:
        """List users ordered by id."""
        pagination = self.ensure_pagination(page=page, limit=limit, sort=["id"])
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            result = repo.paginate(pagination)
            return UserListOut(
                items=[self._to_public(u) for u in result.items],
                total=result.total,
                page=result.page,
                limit=result.limit,
            )

    # --------------------------------------------------------------------- #
    # Self-service
    # --------------------------------------------------------------------- #

    def update_user(self, actor_id: int, user_id: int, dto: UserUpdateIn) -> UserPublicOut:
        """
        Update email, name and/or password of the caller's own account.

        :raises ForbiddenError: When ``actor_id`` differs from ``user_id``.
        :raises RecordNotFoundError: When the user does not exist.
        :raises UniqueConstraintError: When the new email is taken.
        """
        self.ensure_owner(actor_id, user_id)

        updates: dict[str, Any] = {
            k: v
            for k, v in {
                "email": dto.email,
                "name": dto.name,
                "password": dto.password,
            }.items()
            if v is not None
        }

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise RecordNotFoundError(ENTITY, user_id)

            if "email" in updates and repo.exists_by_email(updates["email"], exclude_id=user_id):
                raise UniqueConstraintError("email")

            try:
                repo.assign_updates(user, updates)
            except ValueError as exc:
                raise ServiceValidationError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_users_email"):
                    raise UniqueConstraintError("email") from exc
                raise

            return self._to_public(user)

    def delete_user(self, actor_id: int, user_id: int) -> None:
        """
        Delete the caller's own account together with all of its todos.

        The refresh token is revoked and cached todo data is dropped once the
        deletion has committed.

        :raises ForbiddenError: When ``actor_id`` differs from ``user_id``.
        :raises RecordNotFoundError: When the user does not exist.
        """
        self.ensure_owner(actor_id, user_id)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise RecordNotFoundError(ENTITY, user_id)
            repo.delete(user)

        self.refresh_store.revoke(user_id)
        todo_cache.invalidate_user(self.cache, user_id)
        log.info("user.deleted", extra={"user_id": user_id})
