"""Environment-driven settings classes selected by ``APP_ENV``."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # development | testing | production

load_dotenv()

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})


def env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag; unset returns ``default``, anything non-truthy ``False``."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """Read an integer; unset or blank returns ``default``.

    :raises ValueError: The variable is set to something that is not an int.
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class BaseConfig:
    """Settings shared by every environment.

    Token settings
    --------------
    JWT_SECRET_KEY
        HMAC secret shared by access and refresh tokens.
    JWT_ALGORITHM
        Always ``HS512``; tokens signed otherwise are rejected.
    JWT_ACCESS_TOKEN_EXPIRES / JWT_REFRESH_TOKEN_EXPIRES
        Lifetimes in seconds (1 hour / 14 days).
    JWT_ACCESS_HEADER / JWT_REFRESH_HEADER
        Header names. Clients send ``Bearer <token>``, the server answers
        with the raw token.
    REFRESH_TOKEN_BACKEND
        Where refresh token records live: ``database``, ``redis`` or
        ``memory`` (single process only).
    REDIS_URL
        Required by the ``redis`` backend.

    Everything else (database URI, CORS origins, login rate limit, log
    level) is read from the variable of the same name.
    """

    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = "HS512"
    JWT_ACCESS_TOKEN_EXPIRES = env_int("JWT_ACCESS_TOKEN_EXPIRES", 3600)
    JWT_REFRESH_TOKEN_EXPIRES = env_int("JWT_REFRESH_TOKEN_EXPIRES", 1209600)
    JWT_ACCESS_HEADER = os.getenv("JWT_ACCESS_HEADER", "Authorization")
    JWT_REFRESH_HEADER = os.getenv("JWT_REFRESH_HEADER", "Authorization-refresh")

    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "database")
    REDIS_URL = os.getenv("REDIS_URL")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    DEBUG = False
    TESTING = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")


class DevelopmentConfig(BaseConfig):
    """Local runs: debug on unless ``FLASK_DEBUG`` says otherwise."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600


class TestingConfig(BaseConfig):
    """pytest runs.

    In-memory SQLite (or ``TEST_DATABASE_URL``), a fixed token secret, the
    database refresh store, no rate limiting, and propagated exceptions.
    """

    TESTING = True
    PROPAGATE_EXCEPTIONS = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    RATELIMIT_ENABLED = False
    JWT_SECRET_KEY = "test-secret-" + "x" * 64
    REFRESH_TOKEN_BACKEND = "database"
    REDIS_URL = None


class ProductionConfig(BaseConfig):
    """Deployments; log routing is left to the WSGI server.

    Secrets have no placeholder here: an unset ``JWT_SECRET_KEY`` fails app
    start-up instead of signing tokens with a well-known key.
    """

    SECRET_KEY = os.getenv("SECRET_KEY")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the settings class named by ``APP_ENV`` (development when unknown)."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
