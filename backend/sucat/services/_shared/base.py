# sucat/services/_shared/base.py
from __future__ import annotations

from sucat.core import errors as api_errors
from sucat.services._shared.errors import (
    InvalidCredentialsError,
    NotFoundError,
    ServiceError,
    TokenError,
    TokenVerificationError,
)
from sucat.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork


class BaseService:
    """
    Base class for application services.

    Services orchestrate ports and units of work; they never import Flask
    request objects or touch the global session. HTTP mapping of their errors
    lives in :meth:`translate_exceptions`.
    """

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """Create a read-only Unit of Work."""
        return SQLAlchemyReadOnlyUnitOfWork()

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map a service error to its API (HTTP) counterpart.

        * token and credential errors -> 401 carrying the error ``code``
        * a codec cause that escaped a service -> 401 ``invalid_token``
        * missing users -> 404 carrying the error ``code``
        * any other :class:`ServiceError` -> 400

        Anything else is returned untouched for the Flask handlers.
        """
        if isinstance(exc, TokenError | InvalidCredentialsError):
            return api_errors.Unauthorized(str(exc), code=exc.code)
        if isinstance(exc, TokenVerificationError):
            # Codec causes never cross the boundary
            return api_errors.Unauthorized("Invalid token.", code="invalid_token")
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc), code=exc.code)
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code=exc.code)
        return exc
