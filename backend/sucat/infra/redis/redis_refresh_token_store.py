from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]

from sucat.services._shared.ports import RefreshTokenRecord, RefreshTokenStore


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store, one hash per identity.

    Each identity owns the key ``rt:email:<identity>`` holding ``token`` and
    ``expires_at``; Redis expires the key together with the token. Writes go
    through a MULTI/EXEC pipeline, so concurrent upserts for one identity
    resolve to the last committed writer.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis
    clock: Callable[[], datetime] = field(default=_utc_now)

    @staticmethod
    def _k(identity: str) -> str:
        return f"rt:email:{identity}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        # Naive -> label as UTC (no conversion)
        return int(dt.replace(tzinfo=UTC).timestamp()) if dt.tzinfo is None else int(dt.timestamp())

    def upsert(self, identity: str, token: str, expires_at: datetime) -> None:
        exp_ts = self._to_ts(expires_at)
        ttl = max(1, exp_ts - self._to_ts(self.clock()))
        key = self._k(identity)

        pipe = self.r.pipeline(transaction=True)
        # DEL first so no stale field survives the replacement
        pipe.delete(key)
        pipe.hset(key, mapping={"token": token, "expires_at": str(exp_ts)})
        pipe.expire(key, ttl)
        pipe.execute()

    def delete_by_identity(self, identity: str) -> None:
        self.r.delete(self._k(identity))

    def find_by_identity(self, identity: str) -> RefreshTokenRecord | None:
        h = self.r.hgetall(self._k(identity))
        if not h:
            return None

        def _b(s: bytes | None, default: str = "") -> str:
            return s.decode() if s is not None else default

        expires_at = datetime.fromtimestamp(int(_b(h.get(b"expires_at"), "0")), tz=UTC)
        if expires_at < self.clock():
            return None
        return RefreshTokenRecord(
            identity=identity,
            token=_b(h.get(b"token")),
            expires_at=expires_at,
        )
