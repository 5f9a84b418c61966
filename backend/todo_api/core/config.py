"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

MIN_SECRET_LENGTH: Final[int] = 32

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        HMAC secret signing access tokens (``JWT_SECRET``).
    JWT_REFRESH_SECRET_KEY: str
        Independent HMAC secret signing refresh tokens (``JWT_REFRESH_SECRET``).
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    REDIS_ENABLED: bool
        Turns the Redis cache (and the rate limiter) on.
    REDIS_URL: str | None
        Connection URL for the Redis cache.
    RATELIMIT_DEFAULT: str
        Flask-Limiter default limit built from ``RATE_LIMIT_POINTS`` per
        ``RATE_LIMIT_DURATION`` seconds.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins (``ALLOWED_ORIGINS``).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET", "CHANGE_ME_ACCESS_SECRET")
    JWT_REFRESH_SECRET_KEY = os.getenv("JWT_REFRESH_SECRET", "CHANGE_ME_REFRESH_SECRET")
    JWT_ALGORITHM = "HS256"

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Cache
    REDIS_ENABLED = env_bool("REDIS_ENABLED", False)
    REDIS_URL = os.getenv("REDIS_URL")

    # Rate limiting (Flask-Limiter); only meaningful with a shared store
    RATE_LIMIT_POINTS = env_int("RATE_LIMIT_POINTS", 100)
    RATE_LIMIT_DURATION = env_int("RATE_LIMIT_DURATION", 60)
    RATELIMIT_ENABLED = REDIS_ENABLED
    RATELIMIT_DEFAULT = f"{RATE_LIMIT_POINTS} per {RATE_LIMIT_DURATION} second"
    RATELIMIT_STORAGE_URI = REDIS_URL if REDIS_ENABLED and REDIS_URL else "memory://"
    RATELIMIT_SWALLOW_ERRORS = True
    RATELIMIT_KEY_PREFIX = "rate_limit"
    RATELIMIT_HEADERS_ENABLED = True

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    ENABLE_HSTS = False

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Keeps Redis and rate limiting off; tests inject their own stores.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET_KEY = "test-access-secret-0123456789abcdef0123"
    JWT_REFRESH_SECRET_KEY = "test-refresh-secret-0123456789abcdef012"
    REDIS_ENABLED = False
    RATELIMIT_ENABLED = False
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Secrets are validated at startup by :func:`validate_config`; HSTS is
    emitted on every response.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    ENABLE_HSTS = True


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, Any]) -> None:
    """Fail fast on settings the application cannot run with.

    :param config: Loaded Flask configuration mapping.
    :raises RuntimeError: When secrets are weak or identical, or Redis is
        enabled without a URL.
    """
    access = str(config.get("JWT_SECRET_KEY") or "")
    refresh = str(config.get("JWT_REFRESH_SECRET_KEY") or "")
    if not access or not refresh:
        raise RuntimeError("JWT_SECRET and JWT_REFRESH_SECRET must both be set.")
    if access == refresh:
        raise RuntimeError("Access and refresh tokens must be signed with distinct secrets.")
    if not config.get("DEBUG") and not config.get("TESTING"):
        if len(access) < MIN_SECRET_LENGTH or len(refresh) < MIN_SECRET_LENGTH:
            raise RuntimeError(
                f"JWT secrets must be at least {MIN_SECRET_LENGTH} characters long."
            )
    if config.get("REDIS_ENABLED") and not config.get("REDIS_URL"):
        raise RuntimeError("REDIS_URL is required when REDIS_ENABLED is set.")
