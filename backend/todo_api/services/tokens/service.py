from __future__ import annotations

import logging
from typing import Any

from todo_api.services._shared.errors import TokenExpiredError, TokenInvalidError
from todo_api.services._shared.ports import RefreshTokenStore, TokenProvider
from todo_api.services.tokens.dto import TokenClaims, TokenConfig, TokenPairOut

log = logging.getLogger(__name__)


class TokenService:
    """
    Issue and verify signed, expiring access/refresh tokens.

    Refresh tokens are mirrored in a :class:`RefreshTokenStore`; while that
    store is enabled only the most recently issued refresh token of a user is
    accepted, which makes rotation and remote logout possible.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        refresh_store: RefreshTokenStore,
        config: TokenConfig,
    ) -> None:
        """
        :param token_provider: Adapter signing/decoding JWTs.
        :param refresh_store: Tracker of the active refresh token per user.
        :param config: Secrets and lifetimes.
        """
        self.tokens = token_provider
        self.refresh_store = refresh_store
        self.cfg = config

    # ------------------------------------------------------------------ #
    # Issuing
    # ------------------------------------------------------------------ #

    @staticmethod
    def _claims(user_id: int, email: str) -> dict[str, Any]:
        # registered claim "sub" must be a string
        return {"sub": str(user_id), "email": email}

    def issue_access_token(self, user_id: int, email: str) -> str:
        """Sign ``{email, sub}`` with the access secret (15 minutes)."""
        return self.tokens.encode(
            self._claims(user_id, email),
            secret=self.cfg.access_secret,
            expires_in=self.cfg.access_expires,
        )

    def _sign_refresh(self, user_id: int, email: str) -> str:
        return self.tokens.encode(
            self._claims(user_id, email),
            secret=self.cfg.refresh_secret,
            expires_in=self.cfg.refresh_expires,
        )

    def issue_refresh_token(self, user_id: int, email: str) -> str:
        """
        Sign ``{email, sub}`` with the refresh secret (7 days) and record it
        as the user's active refresh token, replacing any previous one.
        """
        token = self._sign_refresh(user_id, email)
        self.refresh_store.save(user_id, token)
        return token

    def issue_pair(self, user_id: int, email: str) -> TokenPairOut:
        return TokenPairOut(
            access_token=self.issue_access_token(user_id, email),
            refresh_token=self.issue_refresh_token(user_id, email),
        )

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify(self, token: str, secret: str) -> TokenClaims:
        """
        Verify signature and expiry of ``token`` against ``secret``.

        :raises TokenExpiredError: When ``exp`` has passed.
        :raises TokenInvalidError: When the token is malformed, wrongly signed
            or lacks the identity claims.
        """
        payload = self.tokens.decode(token, secret=secret)
        subject = payload.get("sub")
        email = payload.get("email")
        if not isinstance(subject, str) or not subject.isdigit() or not isinstance(email, str):
            raise TokenInvalidError()
        return TokenClaims(user_id=int(subject), email=email)

    def verify_access(self, token: str) -> TokenClaims:
        return self.verify(token, self.cfg.access_secret)

    def verify_refresh(self, token: str) -> TokenClaims:
        """
        Verify a refresh token and require it to be the user's active one.

        With the store disabled, or when a single lookup cannot reach the
        store, signature and expiry alone are accepted.

        :raises TokenExpiredError: When expired or superseded/revoked.
        :raises TokenInvalidError: When the signature or structure is bad.
        """
        claims = self.verify(token, self.cfg.refresh_secret)
        if not self.refresh_store.enabled:
            return claims

        current = self.refresh_store.is_current(claims.user_id, token)
        if current is None:
            log.warning(
                "refresh.store_unavailable",
                extra={"user_id": claims.user_id},
            )
            return claims
        if not current:
            raise TokenExpiredError()
        return claims

    def rotate_refresh(self, claims: TokenClaims, presented: str) -> TokenPairOut:
        """
        Exchange the verified refresh token ``presented`` for a new pair.

        The store swaps ``presented`` for the new refresh token atomically,
        so of two concurrent requests carrying the same token only one gets
        a pair. With the store disabled or unreachable the new pair is issued
        on signature and expiry alone.

        :raises TokenExpiredError: When ``presented`` is no longer the active
            refresh token of the user.
        """
        refresh = self._sign_refresh(claims.user_id, claims.email)
        if self.refresh_store.enabled:
            rotated = self.refresh_store.rotate(claims.user_id, presented, refresh)
            if rotated is None:
                log.warning(
                    "refresh.store_unavailable",
                    extra={"user_id": claims.user_id},
                )
            elif not rotated:
                raise TokenExpiredError()
        return TokenPairOut(
            access_token=self.issue_access_token(claims.user_id, claims.email),
            refresh_token=refresh,
        )

    def revoke_refresh(self, user_id: int) -> None:
        self.refresh_store.revoke(user_id)
