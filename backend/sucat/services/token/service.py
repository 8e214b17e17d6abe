# sucat/services/token/service.py
from __future__ import annotations

import logging
from typing import Any, Protocol

from sucat.core.logger import mask_identity
from sucat.services._shared.base import BaseService
from sucat.services._shared.errors import (
    IdentityNotFoundError,
    InvalidAccessTokenError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    TokenVerificationError,
    UserNotFoundError,
)
from sucat.services._shared.ports import (
    Claims,
    RefreshTokenStore,
    SubjectKind,
    TokenCodec,
    UserDirectory,
)
from sucat.services.token.dto import BEARER_PREFIX, TokenSettings

log = logging.getLogger(__name__)


class HeaderSource(Protocol):
    """Anything exposing request headers (Flask/Werkzeug ``Request``)."""

    headers: Any


class HeaderSink(Protocol):
    """Anything exposing writable response headers and a status code."""

    headers: Any
    status_code: int


class TokenService(BaseService):
    """
    Token lifecycle: issuance, header transport, verification and the
    server-side refresh token record of each identity.

    The service keeps no per-request state. Everything it knows lives either
    in the signed token or in the injected :class:`RefreshTokenStore`.

    Failures are deliberately coarse at this boundary: whatever the codec
    reports (malformed, bad signature, expired) surfaces as
    :class:`InvalidTokenError`, and :meth:`is_token_valid` only answers
    ``True``/``False``. The precise cause is logged, never returned.
    """

    def __init__(
        self,
        *,
        settings: TokenSettings,
        codec: TokenCodec,
        users: UserDirectory,
        refresh_store: RefreshTokenStore,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param settings: Immutable lifetimes and header names.
        :param codec: Signs and verifies token strings.
        :param users: Identity -> user lookup.
        :param refresh_store: One refresh token record per identity.
        """
        self.settings = settings
        self.codec = codec
        self.users = users
        self.refresh_store = refresh_store

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def create_access_token(self, email: str) -> str:
        """Issue an access token for ``email`` with the configured access lifetime."""
        token = self.codec.issue(SubjectKind.ACCESS, email, self.settings.access_expires)
        log.info(
            "token.issued", extra={"token_kind": "access", "identity": mask_identity(email)}
        )
        return token

    def create_refresh_token(self, email: str) -> str:
        """Issue a refresh token for ``email`` with the configured refresh lifetime."""
        token = self.codec.issue(SubjectKind.REFRESH, email, self.settings.refresh_expires)
        log.info(
            "token.issued", extra={"token_kind": "refresh", "identity": mask_identity(email)}
        )
        return token

    # ------------------------------------------------------------------ #
    # Refresh token record
    # ------------------------------------------------------------------ #

    def update_refresh_token(self, email: str, refresh_token: str) -> None:
        """
        Store ``refresh_token`` as the single live record of ``email``.

        Any previous record of the identity is replaced (rotation).

        :raises IdentityNotFoundError: No user is registered under ``email``.
        :raises InvalidRefreshTokenError: ``refresh_token`` does not verify,
            so no expiry can be recorded for it.
        """
        user = self.users.find_by_email(email)
        if user is None:
            raise IdentityNotFoundError(key=email)
        try:
            claims = self.codec.verify(refresh_token)
        except TokenVerificationError as exc:
            self._log_rejection(exc)
            raise InvalidRefreshTokenError() from None
        self.refresh_store.upsert(user.email, refresh_token, claims.expires_at)

    def destroy_refresh_token(self, email: str) -> None:
        """
        Revoke the refresh token record of ``email`` (no-op when none exists).

        :raises IdentityNotFoundError: No user is registered under ``email``.
        """
        user = self.users.find_by_email(email)
        if user is None:
            raise IdentityNotFoundError(key=email)
        self.refresh_store.delete_by_identity(user.email)
        log.info("token.revoked", extra={"token_kind": "refresh", "identity": mask_identity(email)})

    # ------------------------------------------------------------------ #
    # Header transport
    # ------------------------------------------------------------------ #

    def send_access_and_refresh_token(
        self, response: HeaderSink, access_token: str, refresh_token: str
    ) -> None:
        """Write both tokens, raw and unprefixed, onto ``response`` with status 200."""
        response.status_code = 200
        self.set_access_token_header(response, access_token)
        self.set_refresh_token_header(response, refresh_token)

    def send_access_token(self, response: HeaderSink, access_token: str) -> None:
        """Write only the access token onto ``response`` with status 200."""
        response.status_code = 200
        self.set_access_token_header(response, access_token)

    def set_access_token_header(self, response: HeaderSink, access_token: str) -> None:
        response.headers[self.settings.access_header] = access_token

    def set_refresh_token_header(self, response: HeaderSink, refresh_token: str) -> None:
        response.headers[self.settings.refresh_header] = refresh_token

    def extract_access_token(self, request: HeaderSource) -> str | None:
        """Return the bearer token of the access header, or ``None``."""
        return self._extract_bearer(request, self.settings.access_header)

    def extract_refresh_token(self, request: HeaderSource) -> str | None:
        """Return the bearer token of the refresh header, or ``None``."""
        return self._extract_bearer(request, self.settings.refresh_header)

    @staticmethod
    def _extract_bearer(request: HeaderSource, header: str) -> str | None:
        # Absent header and missing/miscased prefix both mean "no token"
        raw = request.headers.get(header)
        if raw is None or not raw.startswith(BEARER_PREFIX):
            log.debug("token.header_absent", extra={"cause": header})
            return None
        token = raw[len(BEARER_PREFIX) :].strip()
        return token or None

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def read_claims(self, token: str) -> Claims:
        """
        Verify ``token`` and return its claims.

        :raises InvalidTokenError: On any verification failure.
        """
        try:
            return self.codec.verify(token)
        except TokenVerificationError as exc:
            self._log_rejection(exc)
            raise InvalidTokenError() from None

    def extract_email(self, token: str) -> str:
        """
        Return the identity claim of a verified token.

        :raises InvalidTokenError: Malformed, wrongly signed or expired token.
        """
        return self.read_claims(token).identity

    def is_token_valid(self, token: str) -> bool:
        """Return whether ``token`` verifies. Never raises."""
        try:
            self.codec.verify(token)
        except TokenVerificationError as exc:
            self._log_rejection(exc)
            return False
        return True

    def get_user_from_request(self, request: HeaderSource) -> Any:
        """
        Resolve the user behind the request's access token.

        :raises InvalidAccessTokenError: No bearer token in the access header,
            or the header carries a refresh token.
        :raises InvalidTokenError: The token does not verify.
        :raises UserNotFoundError: The token's identity has no account.
        """
        token = self.extract_access_token(request)
        if token is None:
            raise InvalidAccessTokenError()
        claims = self.read_claims(token)
        if claims.kind is not SubjectKind.ACCESS:
            log.warning(
                "token.rejected: wrong kind",
                extra={"cause": "wrong_kind", "token_kind": claims.kind.value},
            )
            raise InvalidAccessTokenError()
        email = claims.identity
        user = self.users.find_by_email(email)
        if user is None:
            raise UserNotFoundError(key=email)
        return user

    @staticmethod
    def _log_rejection(exc: TokenVerificationError) -> None:
        log.warning("token.rejected: %s", exc.reason, extra={"cause": exc.kind.value})
