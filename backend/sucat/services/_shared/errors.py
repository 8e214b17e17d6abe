"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or SQLAlchemy directly. They serve as stable contracts between
the token codec, repositories, stores and application services.

The translation to HTTP responses (RFC 7807) is handled by
``BaseService.translate_exceptions()`` and ``sucat/core/errors.py``.

Two families of token errors exist on purpose:

* :class:`TokenVerificationError` and its subclasses carry the precise
  cryptographic cause. Only the codec raises them; they are meant for logs.
* :class:`TokenError` subclasses are what callers of the token service see.
  Every verification cause collapses into one of them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, stores or the codec.
    - The API layer translates them to ``APIError`` through ``BaseService``.
    """

    code = "bad_request"


# --------------------------------------------------------------------------- #
# Codec verification (fine-grained, internal)
# --------------------------------------------------------------------------- #


class VerificationFailure(enum.Enum):
    """Why a token string failed verification."""

    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"


class TokenVerificationError(ServiceError):
    """
    Raised by the token codec when a token cannot be trusted.

    :ivar kind: The precise failure cause.
    """

    kind: VerificationFailure = VerificationFailure.MALFORMED
    code = "invalid_token"

    def __init__(self, reason: str = "") -> None:
        super().__init__(reason or self.kind.value)
        self.reason = reason or self.kind.value


class MalformedTokenError(TokenVerificationError):
    """The string is not a well-formed signed token with the expected claims."""

    kind = VerificationFailure.MALFORMED


class SignatureInvalidError(TokenVerificationError):
    """Signature mismatch, or a signing algorithm other than the expected one."""

    kind = VerificationFailure.SIGNATURE_INVALID


class TokenExpiredError(TokenVerificationError):
    """The ``exp`` claim lies before the codec's current time."""

    kind = VerificationFailure.EXPIRED


# --------------------------------------------------------------------------- #
# Token errors exposed to callers (coarse)
# --------------------------------------------------------------------------- #


class TokenError(ServiceError):
    """Base class for token failures surfaced at the service boundary."""

    code = "invalid_token"
    default_message = "Invalid token."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidTokenError(TokenError):
    """Any verification failure (malformed, bad signature, expired) collapsed."""


class InvalidAccessTokenError(TokenError):
    """The request carries no usable access token."""

    code = "invalid_access_token"
    default_message = "Access token is missing or invalid."


class InvalidRefreshTokenError(TokenError):
    """The refresh token is missing, invalid, of the wrong kind or superseded."""

    code = "invalid_refresh_token"
    default_message = "Refresh token is missing or invalid."


class InvalidCredentialsError(ServiceError):
    """Email/password pair did not match any account."""

    code = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials.") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Lookup misses
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    code = "not_found"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class IdentityNotFoundError(NotFoundError):
    """The identity of a refresh token update/destroy has no user account."""

    entity: str = "User"
    key: str | int = ""

    code = "user_not_found"


@dataclass(slots=True)
class UserNotFoundError(NotFoundError):
    """The identity carried by a valid access token has no user account."""

    entity: str = "User"
    key: str | int = ""

    code = "user_not_found"
