"""Cache keys and (de)serialization for todo listings and statistics.

Key layout::

    todos:{user_id}:{json query}   listing pages
    todos:stats:{user_id}          statistics

Values are JSON text. Undecodable entries are treated as misses.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from todo_api.services._shared.ports import CacheStore
from todo_api.services.todos.dto import TodoPageOut, TodoQueryIn, TodoStatsOut

log = logging.getLogger(__name__)

LISTING_TTL_SECONDS = 300
STATS_TTL_SECONDS = 300


def listing_key(user_id: int, query: TodoQueryIn) -> str:
    serialized = json.dumps(query.as_key_fragment(), sort_keys=True, separators=(",", ":"))
    return f"todos:{user_id}:{serialized}"


def listing_pattern(user_id: int) -> str:
    return f"todos:{user_id}:*"


def stats_key(user_id: int) -> str:
    return f"todos:stats:{user_id}"


def _loads(key: str, raw: str | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        log.warning("cache.corrupt_entry", extra={"cache_key": key, "operation": "get"})
        return None
    return data if isinstance(data, dict) else None


def read_page(cache: CacheStore, key: str) -> TodoPageOut | None:
    data = _loads(key, cache.get(key))
    if data is None:
        return None
    try:
        return TodoPageOut.from_dict(data)
    except (KeyError, TypeError, ValueError):
        log.warning("cache.corrupt_entry", extra={"cache_key": key, "operation": "get"})
        return None


def write_page(cache: CacheStore, key: str, page: TodoPageOut) -> None:
    cache.set(key, json.dumps(page.to_dict()), LISTING_TTL_SECONDS)


def read_stats(cache: CacheStore, user_id: int) -> TodoStatsOut | None:
    key = stats_key(user_id)
    data = _loads(key, cache.get(key))
    if data is None:
        return None
    try:
        return TodoStatsOut.from_dict(data)
    except (KeyError, TypeError, ValueError):
        log.warning("cache.corrupt_entry", extra={"cache_key": key, "operation": "get"})
        return None


def write_stats(cache: CacheStore, user_id: int, stats: TodoStatsOut) -> None:
    cache.set(stats_key(user_id), json.dumps(stats.to_dict()), STATS_TTL_SECONDS)


def invalidate_user(cache: CacheStore, user_id: int) -> None:
    """Drop every cached listing page and the statistics of ``user_id``."""
    cache.delete_pattern(listing_pattern(user_id))
    cache.delete(stats_key(user_id))
