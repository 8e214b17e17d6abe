from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError

from sucat.models.refresh_token import RefreshToken
from sucat.services._shared.ports import RefreshTokenRecord, RefreshTokenStore
from sucat.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


def _as_utc(dt: datetime) -> datetime:
    # SQLite drops tzinfo; stored values are UTC wall time
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


class SqlAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Database-backed refresh token store over the ``refresh_tokens`` table.

    Every write runs in its own read-write Unit of Work. The unique
    constraint on ``email`` backs the one-record-per-identity invariant: when
    two first-time upserts race, the loser's INSERT fails and is replayed
    once as an UPDATE of the winner's row.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow = uow_factory
        self._ro_uow = ro_uow_factory
        self._clock = clock or (lambda: datetime.now(UTC))

    def upsert(self, identity: str, token: str, expires_at: datetime) -> None:
        try:
            self._save(identity, token, expires_at)
        except IntegrityError:
            log.info("refresh_token.upsert_race", extra={"cause": "unique_violation"})
            self._save(identity, token, expires_at)

    def _save(self, identity: str, token: str, expires_at: datetime) -> None:
        with self._uow() as uow:
            uow.refresh_tokens.save(email=identity, token=token, expires_at=expires_at)

    def delete_by_identity(self, identity: str) -> None:
        with self._uow() as uow:
            uow.refresh_tokens.delete_by_email(identity)

    def find_by_identity(self, identity: str) -> RefreshTokenRecord | None:
        with self._ro_uow() as uow:
            row: RefreshToken | None = uow.refresh_tokens.get_by_email(identity)
            if row is None:
                return None
            record = RefreshTokenRecord(
                identity=row.email,
                token=row.token,
                expires_at=_as_utc(row.expires_at),
            )
        if record.expires_at < self._clock():
            return None
        return record
