"""
todo_api.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that the service layer depends
on for caching and token management.

Modules
-------
- :mod:`cache_store`:
    Defines :class:`~.CacheStore` and the no-op :class:`~.NullCacheStore`.

- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for JWT signing and decoding.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`, tracking the single active refresh
    token per user.

Concrete adapters (Redis, PyJWT) live under ``todo_api.infra``.
"""

from __future__ import annotations

from .cache_store import CacheStore, NullCacheStore
from .refresh_token_store import InMemoryRefreshTokenStore, RefreshTokenStore
from .token_provider import TokenProvider

__all__ = [
    "CacheStore",
    "NullCacheStore",
    "TokenProvider",
    "RefreshTokenStore",
    "InMemoryRefreshTokenStore",
]
