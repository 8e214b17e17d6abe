"""
sucat.services._shared.ports
============================

Collection of *ports* (hexagonal interfaces) for the token subsystem.

These ports decouple the service layer from concrete implementations of
token signing, refresh token persistence and user lookup.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.TokenCodec`, :class:`~.Claims` and :class:`~.SubjectKind`.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore` and :class:`~.RefreshTokenRecord`
    plus an in-memory implementation.

- :mod:`user_directory`:
    Defines :class:`~.UserDirectory` plus an in-memory implementation.

Design Notes
------------
Concrete adapters (PyJWT, SQLAlchemy, Redis) implement these interfaces
under ``sucat.infra``; ``UserRepository`` satisfies ``UserDirectory``.
"""

from __future__ import annotations

from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from .token_codec import Claims, SubjectKind, TokenCodec
from .user_directory import InMemoryUserDirectory, UserDirectory

__all__ = [
    "Claims",
    "InMemoryRefreshTokenStore",
    "InMemoryUserDirectory",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "SubjectKind",
    "TokenCodec",
    "UserDirectory",
]
