"""Flask extension singletons and their binding to the app."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

REDIS_KEY = "redis_client"

# Deterministic constraint names keep Alembic diffs stable
metadata = MetaData(
    naming_convention={
        "pk": "pk_%(table_name)s",
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(metadata=metadata, session_options={"autoflush": False})
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)


def init_app(app: Flask) -> None:
    """
    Bind SQLAlchemy, Alembic and the login rate limiter, then connect Redis
    when ``REDIS_URL`` is set.

    :raises RuntimeError: ``REDIS_URL`` is set but the server does not answer.
    """
    db.init_app(app)
    from sucat import models  # noqa: F401  (register tables on the metadata)

    migrate.init_app(app, db)
    limiter.init_app(app)

    url = app.config.get("REDIS_URL")
    if not url:
        app.extensions.pop(REDIS_KEY, None)
        return
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Redis at {url!r} is unreachable") from exc
    app.extensions[REDIS_KEY] = client


def get_redis(app: Flask | None = None) -> redis.Redis:
    """Return the Redis client bound to ``app`` (default: the current app).

    :raises RuntimeError: No ``REDIS_URL`` was configured.
    """
    client = (app or current_app).extensions.get(REDIS_KEY)
    if client is None:
        raise RuntimeError("Redis is not configured; set REDIS_URL.")
    return client
