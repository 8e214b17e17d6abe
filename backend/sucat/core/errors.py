"""RFC 7807 problem+json error handling for the API.

Every error leaving the app is a problem document carrying a stable ``code``
and the request id. 401 responses additionally carry a ``WWW-Authenticate``
challenge naming the token error (RFC 6750 section 3).
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from sucat.core.logger import ensure_request_id

log = logging.getLogger(__name__)


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a problem details payload.

    :param status: HTTP status code.
    :param code: Machine-readable error code (snake_case).
    :param message: Client-safe description.
    :param details: Optional structured details (validation messages).
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if request else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        problem["details"] = details
    return problem


def _problem_response(problem: dict[str, Any]) -> tuple[Response, int]:
    status = int(problem["status"])
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    resp.status_code = status
    if status == HTTPStatus.UNAUTHORIZED:
        resp.headers["WWW-Authenticate"] = f'Bearer error="{problem["code"]}"'
    return resp, status


class APIError(Exception):
    """
    Error rendered as a problem document.

    Parameters
    ----------
    message : str
        Client-facing description.
    status_code : int, optional
        HTTP status, ``400`` by default.
    code : str, optional
        Machine-readable code, ``"bad_request"`` by default.
    details : dict[str, Any] | None, optional
        Extra structured payload.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


class NotFound(APIError):
    """404 for missing resources (users behind a token included)."""

    def __init__(self, message: str = "Resource not found", code: str = "not_found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code=code)


class Unauthorized(APIError):
    """401 for failed authentication.

    ``code`` keeps token failures distinguishable on the wire
    (``invalid_token``, ``invalid_access_token``, ``invalid_refresh_token``,
    ``invalid_credentials``).
    """

    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)


def _status_code_name(status: int) -> str:
    """``422`` -> ``"unprocessable_entity"``; unknown statuses -> ``"error"``."""
    try:
        return HTTPStatus(status).phrase.lower().replace(" ", "_").replace("-", "_")
    except ValueError:
        return "error"


# Database failures: (status, code, client message). Raw driver text stays in the logs.
_DB_FAILURES: dict[type[Exception], tuple[HTTPStatus, str, str]] = {
    IntegrityError: (HTTPStatus.CONFLICT, "conflict", "Resource conflict"),
    OperationalError: (
        HTTPStatus.SERVICE_UNAVAILABLE,
        "service_unavailable",
        "Service temporarily unavailable",
    ),
}


def init_app(app: Flask) -> None:
    """Register problem+json handlers on ``app``.

    5xx are logged at ERROR (with traceback for unexpected failures), 4xx
    at WARNING.
    """

    def _log(status: int, event: str, code: str, *, exc_info: bool = False) -> None:
        level = logging.ERROR if status >= 500 else logging.WARNING
        log.log(level, "%s code=%s status=%s", event, code, status, exc_info=exc_info)

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        _log(err.status_code, "api_error", err.code)
        return _problem_response(err.to_problem())

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _status_code_name(status)
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        _log(status, "http_error", code)
        return _problem_response(_as_problem(status=status, code=code, message=message))

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        _log(HTTPStatus.UNPROCESSABLE_ENTITY, "validation_error", "validation_error")
        return _problem_response(
            _as_problem(
                status=HTTPStatus.UNPROCESSABLE_ENTITY,
                code="validation_error",
                message="Validation failed",
                details={"errors": err.messages},
            )
        )

    def handle_db_error(err: Exception):
        status, code, message = next(
            v for t, v in _DB_FAILURES.items() if isinstance(err, t)
        )
        _log(status, "db_error", code, exc_info=True)
        return _problem_response(_as_problem(status=status, code=code, message=message))

    for exc_type in _DB_FAILURES:
        app.register_error_handler(exc_type, handle_db_error)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        _log(500, "unhandled_exception", "internal_server_error", exc_info=True)
        return _problem_response(
            _as_problem(
                status=HTTPStatus.INTERNAL_SERVER_ERROR,
                code="internal_server_error",
                message="Unexpected error",
            )
        )
