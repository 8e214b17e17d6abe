"""Refresh token repository: one row per identity, replaced on rotation."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select

from sucat.models.refresh_token import RefreshToken
from sucat.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    Transactions and the insert-race retry live in
    :class:`~sucat.infra.sql.sqlalchemy_refresh_token_store.SqlAlchemyRefreshTokenStore`.
    """

    model = RefreshToken

    def _updatable_fields(self):
        return {"token", "expires_at"}

    def get_by_email(self, email: str) -> RefreshToken | None:
        """Return the record stored for ``email``, if any."""
        stmt = select(RefreshToken).where(RefreshToken.email == email)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def save(self, *, email: str, token: str, expires_at: datetime) -> RefreshToken:
        """Update the record for ``email`` in place, or insert a new one.

        :returns: The persisted (flushed) record.
        """
        current = self.get_by_email(email)
        if current is None:
            return self.add(RefreshToken(email=email, token=token, expires_at=expires_at))
        return self.update(current, token=token, expires_at=expires_at)

    def delete_by_email(self, email: str) -> int:
        """Delete the record for ``email``.

        :returns: Number of rows removed (``0`` or ``1``).
        """
        result = self.session.execute(delete(RefreshToken).where(RefreshToken.email == email))
        return int(result.rowcount or 0)
