"""
Contract tests shared by every refresh token store adapter.

Each adapter is exercised through the same scenarios:
- upsert + find
- replacement keeps a single record per identity
- delete (including absent identities)
- expired records are hidden
- concurrent upserts leave exactly one record
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from sucat.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from sucat.infra.sql.sqlalchemy_refresh_token_store import SqlAlchemyRefreshTokenStore
from sucat.services._shared.ports import InMemoryRefreshTokenStore, RefreshTokenRecord

ALICE = "alice@example.com"


@pytest.fixture(params=["memory", "redis", "database"])
def store(request, clock, session):
    """Provide each store adapter driven by the same fake clock."""
    if request.param == "memory":
        return InMemoryRefreshTokenStore(clock=clock)
    if request.param == "redis":
        return RedisRefreshTokenStore(fakeredis.FakeRedis(), clock=clock)
    return SqlAlchemyRefreshTokenStore(clock=clock)


def test_upsert_then_find(store, clock):
    expires_at = clock.now + timedelta(days=14)

    store.upsert(ALICE, "token-1", expires_at)

    assert store.find_by_identity(ALICE) == RefreshTokenRecord(ALICE, "token-1", expires_at)


def test_upsert_replaces_previous_record(store, clock):
    store.upsert(ALICE, "token-1", clock.now + timedelta(days=14))
    store.upsert(ALICE, "token-2", clock.now + timedelta(days=15))

    record = store.find_by_identity(ALICE)
    assert record is not None
    assert record.token == "token-2"
    assert record.expires_at == clock.now + timedelta(days=15)


def test_records_are_isolated_per_identity(store, clock):
    store.upsert(ALICE, "token-a", clock.now + timedelta(days=1))
    store.upsert("bob@example.com", "token-b", clock.now + timedelta(days=1))

    store.delete_by_identity(ALICE)

    assert store.find_by_identity(ALICE) is None
    assert store.find_by_identity("bob@example.com").token == "token-b"


def test_delete_absent_identity_is_noop(store):
    store.delete_by_identity("nobody@example.com")

    assert store.find_by_identity("nobody@example.com") is None


def test_expired_record_is_hidden(store, clock):
    store.upsert(ALICE, "token-1", clock.now + timedelta(minutes=5))

    clock.advance(minutes=5)
    assert store.find_by_identity(ALICE) is not None

    clock.advance(seconds=1)
    assert store.find_by_identity(ALICE) is None


def test_concurrent_upserts_keep_one_record():
    memory = InMemoryRefreshTokenStore()
    expires_at = datetime.now(UTC) + timedelta(days=1)
    tokens = [f"token-{i}" for i in range(32)]
    threads = [
        threading.Thread(target=memory.upsert, args=(ALICE, t, expires_at)) for t in tokens
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(memory) == 1
    assert memory.find_by_identity(ALICE).token in tokens


class TestRedisLayout:
    def test_key_and_ttl(self, clock):
        r = fakeredis.FakeRedis()
        store = RedisRefreshTokenStore(r, clock=clock)

        store.upsert(ALICE, "token-1", clock.now + timedelta(hours=2))

        assert r.hget(f"rt:email:{ALICE}", "token") == b"token-1"
        assert 0 < r.ttl(f"rt:email:{ALICE}") <= 7200
