"""SQL-specific behavior of the refresh token store."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from sucat.infra.sql.sqlalchemy_refresh_token_store import SqlAlchemyRefreshTokenStore
from sucat.models import RefreshToken
from sucat.uow import SQLAlchemyUnitOfWork


def _unique_violation() -> IntegrityError:
    return IntegrityError("INSERT INTO refresh_tokens", {}, Exception("UNIQUE constraint failed"))


def test_upsert_keeps_single_row(session, clock):
    store = SqlAlchemyRefreshTokenStore(clock=clock)

    for i in range(3):
        store.upsert("alice@example.com", f"token-{i}", clock.now + timedelta(days=1))

    rows = session.query(RefreshToken).filter_by(email="alice@example.com").all()
    assert [r.token for r in rows] == ["token-2"]


def test_unique_violation_is_retried_once(session, clock):
    """The loser of a first-insert race replays its write once."""
    attempts = []

    class RacingUnitOfWork(SQLAlchemyUnitOfWork):
        def commit(self) -> None:
            attempts.append(1)
            if len(attempts) == 1:
                raise _unique_violation()
            super().commit()

    store = SqlAlchemyRefreshTokenStore(uow_factory=RacingUnitOfWork, clock=clock)

    store.upsert("alice@example.com", "loser", clock.now + timedelta(days=2))

    assert len(attempts) == 2
    assert store.find_by_identity("alice@example.com").token == "loser"


def test_integrity_error_propagates_after_retry(session, clock):
    class AlwaysFailingUnitOfWork(SQLAlchemyUnitOfWork):
        def commit(self) -> None:
            raise _unique_violation()

    store = SqlAlchemyRefreshTokenStore(uow_factory=AlwaysFailingUnitOfWork, clock=clock)

    with pytest.raises(IntegrityError):
        store.upsert("alice@example.com", "token", clock.now + timedelta(days=1))


def test_naive_timestamps_are_read_as_utc(session, clock):
    store = SqlAlchemyRefreshTokenStore(clock=clock)
    naive = (clock.now + timedelta(hours=1)).replace(tzinfo=None)

    store.upsert("alice@example.com", "token", naive)

    assert store.find_by_identity("alice@example.com").expires_at == clock.now + timedelta(hours=1)
