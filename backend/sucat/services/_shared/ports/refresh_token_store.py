from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for the live refresh token of an identity.

    :ivar identity: Identity claim (normalized email). Unique per store.
    :ivar token: Signed refresh token string.
    :ivar expires_at: Absolute expiration (UTC).
    """

    identity: str
    token: str
    expires_at: datetime


class RefreshTokenStore(Protocol):
    """
    Keyed store holding at most one refresh token record per identity.

    Concurrent upserts for one identity race with last-writer-wins
    semantics; exactly one record survives.
    """

    def upsert(self, identity: str, token: str, expires_at: datetime) -> None:
        """Replace any record of ``identity`` with the given token."""

    def delete_by_identity(self, identity: str) -> None:
        """Remove the record of ``identity``; no-op when absent."""

    def find_by_identity(self, identity: str) -> RefreshTokenRecord | None:
        """Return the live (non-expired) record of ``identity``, if any."""


def _utc(dt: datetime) -> datetime:
    # Naive datetimes are labeled UTC, never converted
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Process-local store keyed by identity.

    .. note::
       A lock serializes writers so the one-record-per-identity invariant
       holds under threaded servers and in unit tests.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._records: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()
        self._clock = clock or (lambda: datetime.now(UTC))

    def upsert(self, identity: str, token: str, expires_at: datetime) -> None:
        record = RefreshTokenRecord(identity=identity, token=token, expires_at=_utc(expires_at))
        with self._lock:
            self._records[identity] = record

    def delete_by_identity(self, identity: str) -> None:
        with self._lock:
            self._records.pop(identity, None)

    def find_by_identity(self, identity: str) -> RefreshTokenRecord | None:
        with self._lock:
            record = self._records.get(identity)
        if record is None or record.expires_at < self._clock():
            return None
        return record

    def __len__(self) -> int:
        return len(self._records)
