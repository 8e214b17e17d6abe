from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol


class SubjectKind(str, enum.Enum):
    """Purpose of a token, carried in its ``sub`` claim."""

    ACCESS = "AccessToken"
    REFRESH = "RefreshToken"


@dataclass(frozen=True, slots=True)
class Claims:
    """
    Claims decoded from a verified token.

    Only trustworthy when returned by :meth:`TokenCodec.verify`.

    :ivar kind: Access or refresh.
    :ivar identity: Identity claim (email).
    :ivar expires_at: Expiry (UTC).
    :ivar issued_at: Issue time (UTC), ``None`` for tokens without ``iat``.
    :ivar token_id: Unique ``jti`` of the token, ``None`` when absent.
    """

    kind: SubjectKind
    identity: str
    expires_at: datetime
    issued_at: datetime | None = None
    token_id: str | None = None


class TokenCodec(Protocol):
    """Port for issuing and verifying signed tokens."""

    def issue(self, kind: SubjectKind, identity: str, validity: timedelta) -> str:
        """Return a signed token expiring ``validity`` after the codec's now."""

    def verify(self, token: str) -> Claims:
        """
        Verify ``token`` and return its claims.

        :raises MalformedTokenError: Structurally invalid token.
        :raises SignatureInvalidError: Bad signature or unexpected algorithm.
        :raises TokenExpiredError: ``exp`` lies in the past.
        """
