from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol


class TokenProvider(Protocol):
    """
    Port for signing and decoding compact JWTs.

    Adapters translate library errors into
    :class:`~todo_api.services._shared.errors.TokenExpiredError` (``exp`` in
    the past) and :class:`~todo_api.services._shared.errors.TokenInvalidError`
    (bad signature, malformed token, missing claims).
    """

    def encode(self, claims: dict[str, Any], *, secret: str, expires_in: timedelta) -> str: ...

    def decode(self, token: str, *, secret: str) -> dict[str, Any]: ...
