"""Authentication flows built on the token service."""

from __future__ import annotations

from .dto import LoginIn, RefreshIn
from .service import AuthService

__all__ = ["AuthService", "LoginIn", "RefreshIn"]
