"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

if TYPE_CHECKING:
    from todo_api.services._shared.ports import CacheStore

log = logging.getLogger(__name__)

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)

CACHE_EXTENSION_KEY = "cache_store"


def _build_cache(app: Flask) -> CacheStore:
    """Select the cache adapter once at startup.

    A Redis outage at boot is not fatal: the application keeps serving
    requests with the no-op cache.
    """
    from todo_api.infra.redis.redis_cache_store import RedisCacheStore
    from todo_api.services._shared.ports import NullCacheStore

    redis_url = app.config.get("REDIS_URL")
    if not app.config.get("REDIS_ENABLED") or not redis_url:
        log.info("cache.disabled")
        return NullCacheStore()

    client = redis.Redis.from_url(redis_url, decode_responses=True)
    try:
        client.ping()
    except RedisError as exc:
        log.error("cache.unavailable: %s; continuing without cache", exc)
        return NullCacheStore()
    log.info("cache.enabled")
    return RedisCacheStore(r=client)


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, rate limiting and the cache store.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`todo_api.models` package to ensure SQLAlchemy metadata is ready
        for migrations.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from todo_api import models as _models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)

    if CACHE_EXTENSION_KEY not in app.extensions:
        app.extensions[CACHE_EXTENSION_KEY] = _build_cache(app)


def get_cache() -> CacheStore:
    """Return the cache store bound to the current application."""
    store = current_app.extensions.get(CACHE_EXTENSION_KEY)
    if store is None:
        raise RuntimeError("Cache store is not initialized. Call init_app() first.")
    return cast("CacheStore", store)
