# todo_api/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from todo_api.services.tokens.dto import TokenPairOut
from todo_api.services.users.dto import UserPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email as typed (trimmed by the service).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Output DTO for a successful login.

    :param tokens: Freshly issued access/refresh pair.
    :type tokens: TokenPairOut
    :param user: Public fields of the authenticated user.
    :type user: UserPublicOut
    """

    tokens: TokenPairOut
    user: UserPublicOut

    @property
    def access_token(self) -> str:
        return self.tokens.access_token

    @property
    def refresh_token(self) -> str:
        return self.tokens.refresh_token
