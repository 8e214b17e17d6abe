"""Authentication endpoints: login, refresh, logout and the current user."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, g, request

from sucat.api.deps import (
    get_auth_service,
    get_token_service,
    json_response,
    require_auth,
    timing,
    translate_service_errors,
)
from sucat.core.extensions import limiter
from sucat.schemas import LoginSchema, UserSchema
from sucat.services.auth import LoginIn, RefreshIn
from sucat.services._shared.errors import InvalidRefreshTokenError

bp = Blueprint("auth", __name__, url_prefix="/auth")

login_schema = LoginSchema()
user_schema = UserSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
@translate_service_errors
def login():
    """Authenticate credentials and return a token pair in the response headers."""

    data = login_schema.load(request.get_json(silent=True) or {})
    user, pair = get_auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    response = json_response({"data": {"email": user.email}})
    get_token_service().send_access_and_refresh_token(
        response, pair.access_token, pair.refresh_token
    )
    return response


@bp.post("/refresh")
@timing
@translate_service_errors
def refresh():
    """Rotate the refresh token carried by the refresh header."""

    tokens = get_token_service()
    refresh_token = tokens.extract_refresh_token(request)
    if refresh_token is None:
        raise InvalidRefreshTokenError()
    pair = get_auth_service().refresh(RefreshIn(refresh_token=refresh_token))
    response = Response(status=200)
    tokens.send_access_and_refresh_token(response, pair.access_token, pair.refresh_token)
    return response


@bp.post("/logout")
@require_auth
@timing
@translate_service_errors
def logout():
    """Revoke the caller's refresh token record."""

    get_auth_service().logout(g.current_user)
    return Response(status=204)


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    return json_response({"data": user_schema.dump(g.current_user)})
