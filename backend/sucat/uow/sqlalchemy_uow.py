"""Units of work over the Flask-scoped SQLAlchemy session."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session

from sucat.core.extensions import db
from sucat.repositories import RefreshTokenRepository, UserRepository
from sucat.uow.base import UnitOfWork


class _Repositories:
    """``users`` and ``refresh_tokens`` bound to one session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.refresh_tokens = RefreshTokenRepository(session=session)


class SQLAlchemyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read-write scope: commits on a clean exit, rolls back otherwise.

    A failing commit is rolled back before the error propagates, so the
    scoped session is reusable afterwards (the refresh token store relies on
    this to retry a lost insert race).
    """

    def __init__(self) -> None:
        super().__init__(db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_Repositories, UnitOfWork):
    """
    Lookup scope: any ORM flush with pending changes raises, and commit is
    refused. Nothing is expired on exit, so loaded users stay usable.
    """

    def __init__(self) -> None:
        super().__init__(db.session)
        self._listening = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        event.listen(self.session, "before_flush", self._refuse_flush)
        self._listening = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._listening:
            event.remove(self.session, "before_flush", self._refuse_flush)
            self._listening = False

    @staticmethod
    def _refuse_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only scope: ORM flush blocked with pending changes.")

    def commit(self) -> None:
        """:raises RuntimeError: Always."""
        raise RuntimeError("Read-only scope does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
