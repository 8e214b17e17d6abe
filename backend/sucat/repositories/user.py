"""User repository for persistence and authentication utilities."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import select

from sucat.models.user import User, normalize_email
from sucat.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Satisfies the :class:`~sucat.services._shared.ports.UserDirectory` port
    through :meth:`find_by_email`. It NEVER handles tokens, only DB-level
    user management.
    """

    model = User

    def _updatable_fields(self):
        """Publicly allowed updatable fields (not including password)."""
        return {"name", "nickname", "department"}

    # ---------------------------- Lookup helpers ----------------------------

    def find_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == normalize_email(email))
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(User.id).where(User.email == normalize_email(email))
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Account ops ----------------------------

    def create(self, *, email: str, password: str, **profile: Any) -> User:
        """Build, stage and flush a new user.

        :param email: Login email (normalized by the model).
        :param password: Raw password; the model hashes it.
        :param profile: Optional ``name``, ``nickname``, ``department``.
        :raises ValueError: If ``profile`` carries non-updatable keys.
        """
        user = User(email=email)
        user.password = password
        for key, value in self._sanitize_update_fields(profile).items():
            setattr(user, key, value)
        return self.add(user)

    def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate a user by email and password.

        :returns: Authenticated user or ``None`` when credentials fail.
        :rtype: User | None
        """
        user = self.find_by_email(email)
        if not user or not user.verify_password(password):
            return None
        return user
