from __future__ import annotations

import logging

from werkzeug.security import check_password_hash, generate_password_hash

from todo_api.repositories.user import UserRepository
from todo_api.services._shared.base import BaseService
from todo_api.services._shared.errors import (
    InvalidCredentialsError,
    ServiceError,
    TokenExpiredError,
    TokenInvalidError,
)
from todo_api.services.auth.dto import LoginIn, LoginOut, RefreshIn
from todo_api.services.tokens.dto import TokenClaims, TokenPairOut
from todo_api.services.tokens.service import TokenService
from todo_api.services.users.dto import UserPublicOut

log = logging.getLogger(__name__)

# Checked when the email is unknown so both failure paths cost one hash check.
_DUMMY_PASSWORD_HASH = generate_password_hash("not-a-real-password")


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout / verify).

    Token signing and refresh-token bookkeeping are delegated to
    :class:`TokenService`; this service only resolves credentials and maps
    failures onto the authentication error contract.
    """

    def __init__(self, *, token_service: TokenService) -> None:
        """
        :param token_service: Issuer/verifier of access and refresh tokens.
        """
        self.tokens = token_service

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: Token pair plus public user fields.
        :raises InvalidCredentialsError: Unknown email or wrong password,
            indistinguishable from each other.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_email(dto.email)
            if user is None:
                check_password_hash(_DUMMY_PASSWORD_HASH, dto.password)
                log.info("auth.login_failed")
                raise InvalidCredentialsError()
            if not user.verify_password(dto.password):
                log.info("auth.login_failed", extra={"user_id": user.id})
                raise InvalidCredentialsError()

            public = UserPublicOut(
                id=user.id,
                email=user.email,
                name=user.name,
                created_at=user.created_at,
                updated_at=user.updated_at,
            )

        pair = self.tokens.issue_pair(public.id, public.email)
        return LoginOut(tokens=pair, user=public)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        The new refresh token atomically replaces the stored one, so the
        presented token cannot be used again, not even by a concurrent
        request. Tokens of deleted accounts are refused even when no
        refresh-token store is available.

        :raises TokenExpiredError: On any verification failure.
        """
        try:
            claims = self.tokens.verify_refresh(dto.refresh_token)
            with self.ro_uow() as uow:
                if uow.users.get(claims.user_id) is None:
                    raise InvalidCredentialsError("account no longer exists")
            return self.tokens.rotate_refresh(claims, dto.refresh_token)
        except ServiceError as exc:
            log.info("auth.refresh_rejected: %s", exc)
            raise TokenExpiredError() from exc

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, user_id: int) -> None:
        """Drop the user's active refresh token. Calling it twice is harmless."""
        self.tokens.revoke_refresh(user_id)

    # ------------------------------------------------------------------ #
    # Access token verification
    # ------------------------------------------------------------------ #

    def verify_token(self, token: str) -> TokenClaims:
        """
        Validate an access token and return its identity claims.

        :raises TokenExpiredError: When the token is expired.
        :raises InvalidCredentialsError: When the signature or structure is bad.
        """
        try:
            return self.tokens.verify_access(token)
        except TokenInvalidError as exc:
            raise InvalidCredentialsError(str(exc)) from exc
