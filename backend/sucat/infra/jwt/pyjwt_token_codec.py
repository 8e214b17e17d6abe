# sucat/infra/jwt/pyjwt_token_codec.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from sucat.services._shared.errors import (
    MalformedTokenError,
    SignatureInvalidError,
    TokenExpiredError,
)
from sucat.services._shared.ports import Claims, SubjectKind, TokenCodec

#: Claim holding the identity (email) on both token kinds
IDENTITY_CLAIM = "email"

SUPPORTED_ALGORITHM = "HS512"


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class JWTTokenCodec(TokenCodec):
    """
    HMAC-SHA512 JWT adapter built on PyJWT.

    ``clock`` is the only source of "now" for both issuance and the expiry
    check; PyJWT's own wall-clock checks (``exp``, ``iat``, ``nbf``) are
    switched off so that an injected clock stays authoritative.

    :param secret: Shared signing secret.
    :param clock: Callable returning an aware UTC ``datetime``.
    """

    secret: str
    clock: Callable[[], datetime] = field(default=utc_now)
    algorithm: str = SUPPORTED_ALGORITHM

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("Token signing secret must not be empty.")
        if self.algorithm != SUPPORTED_ALGORITHM:
            raise ValueError(f"Unsupported signing algorithm: {self.algorithm!r}")

    # -------------------------- issue -----------------------------

    def issue(self, kind: SubjectKind, identity: str, validity: timedelta) -> str:
        if validity <= timedelta(0):
            raise ValueError("Token validity must be positive.")
        now = self.clock()
        payload: dict[str, Any] = {
            "sub": SubjectKind(kind).value,
            IDENTITY_CLAIM: identity,
            "iat": int(now.timestamp()),
            "exp": int((now + validity).timestamp()),
            # Two tokens minted in the same second must still differ
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    # -------------------------- verify ----------------------------

    def verify(self, token: str) -> Claims:
        if not isinstance(token, str) or not token:
            raise MalformedTokenError("token must be a non-empty string")

        # Pin the algorithm before touching the signature (alg confusion, "none").
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as exc:
            # Undecodable segments, non-string "kid"
            raise MalformedTokenError(str(exc)) from exc
        alg = header.get("alg")
        if alg != self.algorithm:
            raise SignatureInvalidError(f"unexpected signing algorithm {alg!r}")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={
                    "require": ["sub", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
            raise SignatureInvalidError(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            # DecodeError, MissingRequiredClaimError, ill-typed registered claims
            raise MalformedTokenError(str(exc)) from exc

        claims = self._to_claims(payload)
        if claims.expires_at < self.clock():
            raise TokenExpiredError(f"expired at {claims.expires_at.isoformat()}")
        return claims

    @staticmethod
    def _to_claims(payload: dict[str, Any]) -> Claims:
        try:
            kind = SubjectKind(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise MalformedTokenError(f"unknown subject {payload['sub']!r}") from exc

        identity = payload.get(IDENTITY_CLAIM)
        if not isinstance(identity, str) or not identity:
            raise MalformedTokenError(f"missing {IDENTITY_CLAIM!r} claim")

        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, int | float):
            raise MalformedTokenError("'exp' claim must be numeric")

        iat = payload.get("iat")
        if isinstance(iat, bool) or not isinstance(iat, int | float):
            iat = None

        # Out-of-range timestamps (1e300, NaN) overflow the platform time_t
        try:
            expires_at = datetime.fromtimestamp(exp, tz=UTC)
            issued_at = datetime.fromtimestamp(iat, tz=UTC) if iat is not None else None
        except (OverflowError, OSError, ValueError) as exc:
            raise MalformedTokenError(f"timestamp out of range: {exc}") from exc

        jti = payload.get("jti")
        return Claims(
            kind=kind,
            identity=identity,
            expires_at=expires_at,
            issued_at=issued_at,
            token_id=jti if isinstance(jti, str) else None,
        )
