from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol


class UserDirectory(Protocol):
    """Identity -> user lookup consumed by the token service."""

    def find_by_email(self, email: str) -> Any | None:
        """Return the user registered under ``email`` (case-insensitive), or ``None``."""


class InMemoryUserDirectory(UserDirectory):
    """Dictionary-backed directory for unit tests and scripts.

    Users are any objects exposing an ``email`` attribute.
    """

    def __init__(self, users: Iterable[Any] = ()) -> None:
        self._users: dict[str, Any] = {}
        for user in users:
            self.add(user)

    def add(self, user: Any) -> None:
        self._users[user.email.strip().lower()] = user

    def remove(self, email: str) -> None:
        self._users.pop(email.strip().lower(), None)

    def find_by_email(self, email: str) -> Any | None:
        return self._users.get(email.strip().lower())
