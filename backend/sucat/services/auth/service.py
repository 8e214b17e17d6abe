# sucat/services/auth/service.py
from __future__ import annotations

import hmac
import logging
from typing import Any

from sucat.core.logger import mask_identity
from sucat.repositories.user import UserRepository
from sucat.services._shared.base import BaseService
from sucat.services._shared.errors import (
    IdentityNotFoundError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
)
from sucat.services._shared.ports import SubjectKind
from sucat.services.auth.dto import LoginIn, RefreshIn
from sucat.services.token.dto import TokenPairOut
from sucat.services.token.service import TokenService

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout).

    Token mechanics are delegated to :class:`TokenService`; this service only
    decides *when* a pair is issued, rotated or revoked.

    Rotation model
    --------------
    Each identity owns exactly one live refresh token. A refresh request is
    accepted only when its token equals that stored record; the record is
    then replaced, so the presented token can never be used twice.
    """

    def __init__(self, *, tokens: TokenService) -> None:
        """
        Initialize the service with its dependencies.

        :param tokens: Token lifecycle service (codec, store, directory).
        """
        self.tokens = tokens

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> tuple[Any, TokenPairOut]:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: The authenticated user and its access/refresh pair.
        :raises InvalidCredentialsError: Unknown email or wrong password.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.authenticate(dto.email, dto.password)
            if user is None:
                log.warning("auth.login_failed", extra={"identity": mask_identity(dto.email)})
                raise InvalidCredentialsError()
            email = user.email

        pair = self._issue_pair(email)
        log.info("auth.login", extra={"identity": mask_identity(email)})
        return user, pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        :raises InvalidRefreshTokenError: Token does not verify, is an access
            token, or is not the identity's current record.
        :raises IdentityNotFoundError: The identity lost its account; its
            record is destroyed before raising.
        """
        try:
            claims = self.tokens.read_claims(dto.refresh_token)
        except InvalidTokenError:
            raise InvalidRefreshTokenError() from None

        if claims.kind is not SubjectKind.REFRESH:
            log.warning("auth.refresh_rejected", extra={"cause": "wrong_kind"})
            raise InvalidRefreshTokenError("Wrong token type: refresh token required.")

        stored = self.tokens.refresh_store.find_by_identity(claims.identity)
        if stored is None or not hmac.compare_digest(stored.token, dto.refresh_token):
            log.warning(
                "auth.refresh_rejected",
                extra={"cause": "superseded", "identity": mask_identity(claims.identity)},
            )
            raise InvalidRefreshTokenError("Refresh token is no longer valid. Please sign in.")

        user = self.tokens.users.find_by_email(claims.identity)
        if user is None:
            self.tokens.refresh_store.delete_by_identity(claims.identity)
            raise IdentityNotFoundError(key=claims.identity)

        return self._issue_pair(user.email)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, user: Any) -> None:
        """Revoke the refresh token record of ``user``.

        Access tokens already issued stay valid until they expire.
        """
        self.tokens.destroy_refresh_token(user.email)

    # ------------------------------------------------------------------ #

    def _issue_pair(self, email: str) -> TokenPairOut:
        access = self.tokens.create_access_token(email)
        refresh = self.tokens.create_refresh_token(email)
        self.tokens.update_refresh_token(email, refresh)
        return TokenPairOut(access_token=access, refresh_token=refresh)
