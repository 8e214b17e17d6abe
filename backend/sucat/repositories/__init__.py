"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from sucat.repositories.base import BaseRepository
from sucat.repositories.refresh_token import RefreshTokenRepository
from sucat.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
