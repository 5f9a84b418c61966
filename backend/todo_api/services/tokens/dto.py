from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

ACCESS_TOKEN_LIFETIME = timedelta(minutes=15)
REFRESH_TOKEN_LIFETIME = timedelta(days=7)


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Token signing configuration.

    :param access_secret: HMAC secret for access tokens.
    :type access_secret: str
    :param refresh_secret: Independent HMAC secret for refresh tokens.
    :type refresh_secret: str
    :param access_expires: Access token lifetime (15 minutes).
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime (7 days).
    :type refresh_expires: timedelta
    """

    access_secret: str
    refresh_secret: str
    access_expires: timedelta = field(default=ACCESS_TOKEN_LIFETIME)
    refresh_expires: timedelta = field(default=REFRESH_TOKEN_LIFETIME)


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified identity carried by a token.

    :param user_id: Subject (``sub``) as an integer user id.
    :type user_id: int
    :param email: Email claim at issue time.
    :type email: str
    """

    user_id: int
    email: str


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str
