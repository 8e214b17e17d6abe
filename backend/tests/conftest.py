"""Shared fixtures: one app per run, one rolled-back transaction per test.

Units of work commit for real, but only into a SAVEPOINT nested inside an
outer transaction that is discarded when the test finishes.
"""

from __future__ import annotations

import os

import pytest
from faker import Faker
from freezegun import freeze_time as _freeze_time
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from sucat.core.config import TestingConfig
from sucat.core.extensions import db as _db
from sucat.factory import create_app
from tests.factories import SQLAlchemySession
from tests.helpers.clock import FakeClock


@pytest.fixture(scope="session")
def app():
    """Testing app; deployment env vars must not leak into it."""
    for name in ("DATABASE_URL", "REDIS_URL"):
        os.environ.pop(name, None)
    app = create_app(TestingConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    conn = db.engine.connect()
    yield conn
    conn.close()


@pytest.fixture()
def session(db, connection):
    """
    Scoped session bound to ``connection`` and swapped in for ``db.session``.

    Whenever application code commits, the SAVEPOINT it consumed is reopened
    so the next statement still lands inside the outer transaction.
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, future=True))
    savepoint = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _reopen_savepoint(sess, trans):  # pragma: no cover
        nonlocal savepoint
        if trans.nested and not trans._parent.nested:
            savepoint = connection.begin_nested()

    flask_session = db.session
    flask_session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = flask_session
        outer.rollback()


@pytest.fixture(autouse=True)
def _factories_session(session):
    SQLAlchemySession.set(session)
    yield


@pytest.fixture()
def client(app, session):
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    Faker.seed(1337)
    return Faker()


@pytest.fixture()
def clock():
    """Manually advanced UTC clock, starts at 2024-01-01T00:00:00Z."""
    return FakeClock()


@pytest.fixture()
def freeze_time():
    """``freeze_time(target)`` context factory, 2024-01-01 by default."""

    def _factory(target: str | None = None):
        return _freeze_time(target or "2024-01-01")

    return _factory
