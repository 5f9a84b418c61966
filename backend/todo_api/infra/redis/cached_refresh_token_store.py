from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from todo_api.services._shared.ports import CacheStore, RefreshTokenStore

REFRESH_TOKEN_TTL_SECONDS: Final[int] = 7 * 24 * 60 * 60  # 604800


@dataclass(slots=True)
class CachedRefreshTokenStore(RefreshTokenStore):
    """
    Mirror of the active refresh token at ``refresh_token:{user_id}``.

    Each save overwrites the previous value, so only the most recently issued
    refresh token of a user is accepted while the cache is enabled.

    :param cache: Cache adapter (Redis or no-op).
    :param ttl: Lifetime of the mirrored token, matching the JWT expiry.
    """

    cache: CacheStore
    ttl: int = REFRESH_TOKEN_TTL_SECONDS

    @staticmethod
    def key(user_id: int) -> str:
        return f"refresh_token:{user_id}"

    @property
    def enabled(self) -> bool:
        return bool(self.cache.enabled)

    def save(self, user_id: int, token: str) -> None:
        self.cache.set(self.key(user_id), token, self.ttl)

    def is_current(self, user_id: int, token: str) -> bool | None:
        return self.cache.compare(self.key(user_id), token)

    def rotate(self, user_id: int, presented: str, token: str) -> bool | None:
        return self.cache.swap(self.key(user_id), presented, token, self.ttl)

    def revoke(self, user_id: int) -> None:
        self.cache.delete(self.key(user_id))
