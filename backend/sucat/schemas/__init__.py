"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema
from .user import UserSchema

__all__ = ["LoginSchema", "UserSchema"]
