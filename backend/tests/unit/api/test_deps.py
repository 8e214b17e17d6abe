"""Token service wiring from application config."""

from __future__ import annotations

import fakeredis
import pytest
from flask import Flask

from sucat.api.deps import (
    TOKEN_SERVICE_KEY,
    build_refresh_store,
    build_token_service,
    get_token_service,
)
from sucat.core.config import TestingConfig
from sucat.core.extensions import REDIS_KEY
from sucat.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from sucat.infra.sql.sqlalchemy_refresh_token_store import SqlAlchemyRefreshTokenStore
from sucat.services._shared.ports import InMemoryRefreshTokenStore
from sucat.services.token import TokenService


def _bare_app(**overrides) -> Flask:
    app = Flask(__name__)
    app.config.from_object(TestingConfig)
    app.config.update(overrides)
    return app


@pytest.mark.parametrize(
    ("backend", "expected"),
    [
        ("database", SqlAlchemyRefreshTokenStore),
        ("memory", InMemoryRefreshTokenStore),
        (" Memory ", InMemoryRefreshTokenStore),
    ],
)
def test_build_refresh_store_by_backend(backend, expected):
    store = build_refresh_store(_bare_app(REFRESH_TOKEN_BACKEND=backend))

    assert isinstance(store, expected)


def test_build_refresh_store_redis_uses_bound_client():
    app = _bare_app(REFRESH_TOKEN_BACKEND="redis")
    app.extensions[REDIS_KEY] = fakeredis.FakeRedis()

    assert isinstance(build_refresh_store(app), RedisRefreshTokenStore)


def test_build_refresh_store_redis_without_url():
    with pytest.raises(RuntimeError, match="REDIS_URL"):
        build_refresh_store(_bare_app(REFRESH_TOKEN_BACKEND="redis"))


def test_build_refresh_store_rejects_unknown_backend():
    with pytest.raises(ValueError, match="REFRESH_TOKEN_BACKEND"):
        build_refresh_store(_bare_app(REFRESH_TOKEN_BACKEND="mongo"))


def test_build_token_service_rejects_empty_secret():
    with pytest.raises(ValueError):
        build_token_service(_bare_app(JWT_SECRET_KEY=""))


def test_app_holds_a_single_token_service(app):
    service = app.extensions[TOKEN_SERVICE_KEY]

    assert isinstance(service, TokenService)
    with app.app_context():
        assert get_token_service() is service
