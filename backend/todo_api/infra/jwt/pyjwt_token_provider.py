from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import uuid4

import jwt

from todo_api.services._shared.errors import TokenExpiredError, TokenInvalidError
from todo_api.services._shared.ports import TokenProvider

REQUIRED_CLAIMS = ("exp", "sub")


@dataclass(slots=True)
class PyJWTTokenProvider(TokenProvider):
    """
    Adapter signing HS256 tokens with PyJWT.

    The secret is passed per call so access and refresh tokens can be signed
    with independent keys.

    :param algorithm: JWS algorithm, ``HS256`` by default.
    :param leeway: Clock skew tolerated when checking ``exp``.
    """

    algorithm: str = "HS256"
    leeway: timedelta = field(default_factory=lambda: timedelta(seconds=0))

    def encode(self, claims: dict[str, Any], *, secret: str, expires_in: timedelta) -> str:
        now = datetime.now(UTC)
        payload = dict(claims)
        payload.update({"iat": now, "exp": now + expires_in})
        # unique per token so rotation never re-issues an identical string
        payload.setdefault("jti", uuid4().hex)
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def decode(self, token: str, *, secret: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                leeway=self.leeway,
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.PyJWTError as exc:
            raise TokenInvalidError() from exc
        return cast(dict[str, Any], payload)
