# sucat/services/token/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

# Fixed scheme prefix expected on inbound token headers (case-sensitive)
BEARER_PREFIX = "Bearer "


# ------------------------------ Settings ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Immutable token configuration, built once per process.

    :param secret: Shared HMAC signing secret.
    :type secret: str
    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param access_header: Header name carrying the access token.
    :type access_header: str
    :param refresh_header: Header name carrying the refresh token.
    :type refresh_header: str
    """

    secret: str
    access_expires: timedelta
    refresh_expires: timedelta
    access_header: str = "Authorization"
    refresh_header: str = "Authorization-refresh"

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("JWT_SECRET_KEY must not be empty.")
        if self.access_expires <= timedelta(0) or self.refresh_expires <= timedelta(0):
            raise ValueError("Token lifetimes must be positive.")
        if not self.access_header or not self.refresh_header:
            raise ValueError("Token header names must not be empty.")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> TokenSettings:
        """
        Build settings from a Flask config mapping.

        :param config: Mapping with ``JWT_*`` keys (lifetimes in seconds).
        :raises ValueError: On a missing secret, non-positive lifetime or empty header name.
        """
        return cls(
            secret=str(config.get("JWT_SECRET_KEY") or ""),
            access_expires=timedelta(seconds=int(config.get("JWT_ACCESS_TOKEN_EXPIRES", 3600))),
            refresh_expires=timedelta(
                seconds=int(config.get("JWT_REFRESH_TOKEN_EXPIRES", 1209600))
            ),
            access_header=str(config.get("JWT_ACCESS_HEADER", "Authorization")),
            refresh_header=str(config.get("JWT_REFRESH_HEADER", "Authorization-refresh")),
        )


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str
