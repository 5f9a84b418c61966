from __future__ import annotations

import logging
from dataclasses import dataclass

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError, WatchError  # type: ignore[import-untyped]

from todo_api.services._shared.ports import CacheStore

log = logging.getLogger(__name__)

# Keys removed per DEL round-trip while scanning a pattern
DELETE_BATCH_SIZE = 500


@dataclass(slots=True)
class RedisCacheStore(CacheStore):
    """
    Redis-backed cache that degrades to a miss on any backend failure.

    :param r: A Redis client created with ``decode_responses=True``.
    """

    r: redis.Redis
    enabled: bool = True

    # -------------------- helpers --------------------

    @staticmethod
    def _warn(operation: str, key: str, exc: Exception) -> None:
        log.warning(
            "cache.%s failed: %s",
            operation,
            exc,
            extra={"operation": operation, "cache_key": key},
        )

    # -------------------- API ------------------------

    def get(self, key: str) -> str | None:
        """Return the cached string or ``None`` on a miss or failure."""
        try:
            value = self.r.get(key)
        except RedisError as exc:
            self._warn("get", key, exc)
            return None
        if value is None:
            return None
        return value if isinstance(value, str) else value.decode("utf-8")

    def set(self, key: str, value: str, ttl: int) -> bool:
        """Store ``value`` for ``ttl`` seconds; ``False`` when Redis is unavailable."""
        try:
            return bool(self.r.set(key, value, ex=ttl))
        except RedisError as exc:
            self._warn("set", key, exc)
            return False

    def delete(self, key: str) -> bool:
        """Delete a single key. Missing keys are not an error."""
        try:
            return bool(self.r.delete(key))
        except RedisError as exc:
            self._warn("delete", key, exc)
            return False

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob ``pattern``.

        Uses ``SCAN`` so the server is never blocked by ``KEYS``; deletion is
        batched. A failure halfway leaves the remaining keys to expire by TTL.

        :returns: Number of keys removed.
        """
        removed = 0
        batch: list[str] = []
        try:
            for key in self.r.scan_iter(match=pattern, count=DELETE_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= DELETE_BATCH_SIZE:
                    removed += int(self.r.delete(*batch))
                    batch.clear()
            if batch:
                removed += int(self.r.delete(*batch))
        except RedisError as exc:
            self._warn("delete_pattern", pattern, exc)
        return removed

    def compare(self, key: str, expected: str) -> bool | None:
        """Return whether ``key`` holds ``expected``; ``None`` when Redis is unavailable."""
        try:
            value = self.r.get(key)
        except RedisError as exc:
            self._warn("compare", key, exc)
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value == expected

    def swap(self, key: str, expected: str, value: str, ttl: int) -> bool | None:
        """
        Replace ``expected`` with ``value`` in one optimistic transaction.

        ``WATCH`` makes the ``SET`` fail when another client touched ``key``
        between the read and ``EXEC``, so two callers presenting the same
        ``expected`` value cannot both succeed.
        """
        try:
            with self.r.pipeline() as pipe:
                pipe.watch(key)
                current = pipe.get(key)
                if isinstance(current, bytes):
                    current = current.decode("utf-8")
                if current != expected:
                    pipe.unwatch()
                    return False
                pipe.multi()
                pipe.set(key, value, ex=ttl)
                pipe.execute()
                return True
        except WatchError:
            return False
        except RedisError as exc:
            self._warn("swap", key, exc)
            return None
