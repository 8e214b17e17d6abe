"""Token lifecycle service and its settings."""

from __future__ import annotations

from .dto import BEARER_PREFIX, TokenPairOut, TokenSettings
from .service import TokenService

__all__ = ["BEARER_PREFIX", "TokenPairOut", "TokenService", "TokenSettings"]
