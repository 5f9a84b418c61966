from __future__ import annotations

from typing import Protocol


class CacheStore(Protocol):
    """
    Port for the advisory key/value cache.

    Implementations must never raise on backend failures: a failed call is
    logged and reported as a miss (``None``) or a no-op (``False`` / ``0``).

    :ivar enabled: ``True`` when a real backend is configured.
    """

    enabled: bool

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl: int) -> bool: ...

    def delete(self, key: str) -> bool: ...

    def delete_pattern(self, pattern: str) -> int: ...

    def compare(self, key: str, expected: str) -> bool | None:
        """
        Compare the stored value with ``expected``.

        :returns: ``True``/``False`` for a definite answer, ``None`` when the
            backend could not be consulted.
        """
        ...

    def swap(self, key: str, expected: str, value: str, ttl: int) -> bool | None:
        """
        Atomically replace ``expected`` with ``value`` (for ``ttl`` seconds).

        :returns: ``True`` when swapped, ``False`` when the stored value was
            not ``expected`` (or changed concurrently), ``None`` when the
            backend could not be consulted.
        """
        ...


class NullCacheStore:
    """No-op cache selected when Redis is disabled or unreachable."""

    enabled = False

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str, ttl: int) -> bool:
        return False

    def delete(self, key: str) -> bool:
        return False

    def delete_pattern(self, pattern: str) -> int:
        return 0

    def compare(self, key: str, expected: str) -> bool | None:
        return None

    def swap(self, key: str, expected: str, value: str, ttl: int) -> bool | None:
        return None
