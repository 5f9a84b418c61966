from __future__ import annotations

from typing import Protocol


class RefreshTokenStore(Protocol):
    """
    Port tracking the single active refresh token per user.

    :ivar enabled: ``False`` when no backing store is available; callers then
        rely on signature and expiry alone.
    """

    enabled: bool

    def save(self, user_id: int, token: str) -> None: ...

    def is_current(self, user_id: int, token: str) -> bool | None: ...

    def rotate(self, user_id: int, presented: str, token: str) -> bool | None:
        """
        Replace ``presented`` with ``token`` only if ``presented`` is still
        the active one, as a single atomic step.

        :returns: ``True`` when rotated, ``False`` when ``presented`` was
            superseded, ``None`` when the store could not be consulted.
        """
        ...

    def revoke(self, user_id: int) -> None: ...


class InMemoryRefreshTokenStore:
    """Dictionary-backed store used by unit tests."""

    enabled = True

    def __init__(self) -> None:
        self._tokens: dict[int, str] = {}

    def save(self, user_id: int, token: str) -> None:
        self._tokens[user_id] = token

    def is_current(self, user_id: int, token: str) -> bool | None:
        return self._tokens.get(user_id) == token

    def rotate(self, user_id: int, presented: str, token: str) -> bool | None:
        if self._tokens.get(user_id) != presented:
            return False
        self._tokens[user_id] = token
        return True

    def revoke(self, user_id: int) -> None:
        self._tokens.pop(user_id, None)

    def current(self, user_id: int) -> str | None:
        return self._tokens.get(user_id)
