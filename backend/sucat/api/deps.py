"""Shared API helpers: token service wiring, auth guard and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Flask, Response, current_app, g, jsonify, request

from sucat.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from sucat.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from sucat.infra.sql.sqlalchemy_refresh_token_store import SqlAlchemyRefreshTokenStore
from sucat.infra.sql.sqlalchemy_user_directory import SqlAlchemyUserDirectory
from sucat.services._shared.base import BaseService
from sucat.services._shared.errors import ServiceError
from sucat.services._shared.ports import InMemoryRefreshTokenStore, RefreshTokenStore
from sucat.services.auth import AuthService
from sucat.services.token import TokenService, TokenSettings

F = TypeVar("F", bound=Callable[..., Any])

TOKEN_SERVICE_KEY = "token_service"
REFRESH_TOKEN_BACKENDS = ("database", "redis", "memory")


# --------------------------- Service wiring ---------------------------------


def build_refresh_store(app: Flask) -> RefreshTokenStore:
    """Instantiate the refresh token store selected by ``REFRESH_TOKEN_BACKEND``.

    :raises ValueError: On an unknown backend name.
    """
    backend = str(app.config.get("REFRESH_TOKEN_BACKEND", "database")).strip().lower()
    if backend == "database":
        return SqlAlchemyRefreshTokenStore()
    if backend == "redis":
        from sucat.core.extensions import get_redis

        return RedisRefreshTokenStore(get_redis(app))
    if backend == "memory":
        return InMemoryRefreshTokenStore()
    raise ValueError(
        f"Unknown REFRESH_TOKEN_BACKEND {backend!r}; expected one of {REFRESH_TOKEN_BACKENDS}."
    )


def build_token_service(app: Flask) -> TokenService:
    """Build the process-wide :class:`TokenService` from ``app.config``."""
    settings = TokenSettings.from_config(app.config)
    codec = JWTTokenCodec(
        settings.secret, algorithm=str(app.config.get("JWT_ALGORITHM", "HS512"))
    )
    return TokenService(
        settings=settings,
        codec=codec,
        users=SqlAlchemyUserDirectory(),
        refresh_store=build_refresh_store(app),
    )


def init_app(app: Flask) -> None:
    """Build the token service once and park it in ``app.extensions``."""
    app.extensions[TOKEN_SERVICE_KEY] = build_token_service(app)


def get_token_service() -> TokenService:
    """Return the token service of the current application."""
    return cast(TokenService, current_app.extensions[TOKEN_SERVICE_KEY])


def get_auth_service() -> AuthService:
    return AuthService(tokens=get_token_service())


# --------------------------- Decorators -------------------------------------


def translate_service_errors(func: F) -> F:
    """Re-raise service-level errors as their API (HTTP) counterparts."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ServiceError as exc:
            raise BaseService.translate_exceptions(exc) from exc

    return wrapper  # type: ignore[return-value]


def require_auth(func: F) -> F:
    """Resolve the access token's user into ``g.current_user`` or fail with 401."""

    @functools.wraps(func)
    @translate_service_errors
    def wrapper(*args: Any, **kwargs: Any):
        g.current_user = get_token_service().get_user_from_request(request)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
