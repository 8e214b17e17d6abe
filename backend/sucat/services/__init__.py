"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`sucat.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``sucat.services._shared.base``)
    * :class:`BaseService`

- Token service (from ``sucat.services.token``)
    * :class:`TokenService`
    * :class:`TokenSettings`, :class:`TokenPairOut`

- Auth service (from ``sucat.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`RefreshIn`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .auth import AuthService, LoginIn, RefreshIn
from .token import TokenPairOut, TokenService, TokenSettings

__all__ = [
    # Base
    "BaseService",
    # Token
    "TokenService",
    "TokenSettings",
    "TokenPairOut",
    # Auth
    "AuthService",
    "LoginIn",
    "RefreshIn",
]
