"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Cache fixtures
provide a fakeredis-backed store, a no-op store and a store whose server is
unreachable.
"""

from __future__ import annotations

import os

import fakeredis
import pytest
from sqlalchemy.orm import scoped_session, sessionmaker

from todo_api.core.config import TestingConfig
from todo_api.core.extensions import CACHE_EXTENSION_KEY
from todo_api.core.extensions import db as _db  # Flask-SQLAlchemy instance
from todo_api.factory import create_app  # application factory under test
from todo_api.infra.jwt.pyjwt_token_provider import PyJWTTokenProvider
from todo_api.infra.redis.cached_refresh_token_store import CachedRefreshTokenStore
from todo_api.infra.redis.redis_cache_store import RedisCacheStore
from todo_api.services._shared.ports import NullCacheStore
from todo_api.services.tokens.dto import TokenConfig
from todo_api.services.tokens.service import TokenService


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Redis and rate limiting stay off; tests swap the cache store in.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    The outer transaction and its SAVEPOINT belong to the fixture. The
    session opens its own SAVEPOINT per transaction, so ``commit()`` inside
    application code only releases that inner SAVEPOINT and everything is
    rolled back when the test ends.
    """
    # 1) Top-level transaction + SAVEPOINT per test
    top_trans = connection.begin()
    connection.begin_nested()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(
        bind=connection,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )
    scoped = scoped_session(SessionFactory)

    # 3) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
    SQLAlchemySession.set(None)


# -- HTTP ----------------------------------------------------------------------
@pytest.fixture()
def client(app):
    """Flask test client sharing the transactional session."""
    return app.test_client()


# -- Cache stores --------------------------------------------------------------
@pytest.fixture()
def fake_redis():
    """Provide a fresh FakeRedis client (string responses) for each test."""
    server = fakeredis.FakeServer()
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture()
def redis_cache(fake_redis) -> RedisCacheStore:
    return RedisCacheStore(r=fake_redis)


@pytest.fixture()
def broken_cache() -> RedisCacheStore:
    """A Redis-backed store whose server refuses every command."""
    server = fakeredis.FakeServer()
    server.connected = False
    return RedisCacheStore(r=fakeredis.FakeRedis(server=server, decode_responses=True))


@pytest.fixture()
def null_cache() -> NullCacheStore:
    return NullCacheStore()


@pytest.fixture()
def app_with_cache(app, redis_cache):
    """Install the fakeredis store on the app for the duration of a test."""
    previous = app.extensions.get(CACHE_EXTENSION_KEY)
    app.extensions[CACHE_EXTENSION_KEY] = redis_cache
    try:
        yield app
    finally:
        app.extensions[CACHE_EXTENSION_KEY] = previous


# -- Tokens --------------------------------------------------------------------
@pytest.fixture()
def token_config(app) -> TokenConfig:
    return TokenConfig(
        access_secret=app.config["JWT_SECRET_KEY"],
        refresh_secret=app.config["JWT_REFRESH_SECRET_KEY"],
    )


@pytest.fixture()
def make_token_service(token_config):
    """Build a TokenService over a given cache store."""

    def _make(cache) -> TokenService:
        return TokenService(
            token_provider=PyJWTTokenProvider(),
            refresh_store=CachedRefreshTokenStore(cache=cache),
            config=token_config,
        )

    return _make
