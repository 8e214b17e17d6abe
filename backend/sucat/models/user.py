"""User model definition for the chat service."""

from __future__ import annotations

import enum
from typing import Any

from sqlalchemy import Enum, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates
from werkzeug.security import check_password_hash, generate_password_hash

from sucat.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


def normalize_email(email: str) -> str:
    """Return the stored form of an email: trimmed and lowercased."""
    return email.strip().lower()


class UserRole(str, enum.Enum):
    """Authorization role stored with each account."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Chat account and the identity behind every issued token.

    The normalized ``email`` is the identity claim embedded in tokens and
    the key of the account's refresh token record.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        Hashed password (write-only setter via ``password``).
    name : str | None
        Real name.
    nickname : str | None
        Public alias shown in chat rooms.
    department : str | None
        Free-form affiliation.
    role : UserRole
        Authorization role, ``USER`` by default.
    """

    __tablename__ = "users"
    __repr_fields__ = ("email",)

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=16),
        nullable=False,
        default=UserRole.USER,
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    @property
    def password(self) -> Any:  # pragma: no cover - write-only
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """Store a Werkzeug hash of ``raw``.

        :raises ValueError: ``raw`` is empty or not a string.
        """
        if not raw or not isinstance(raw, str):
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    @validates("email")
    def _validate_email(self, key: str, value: str) -> str:
        # Shape check only; the login schema validates properly
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Email is required.")
        email = normalize_email(value)
        _, at, domain = email.partition("@")
        if not at or "." not in domain:
            raise ValueError("Email format looks invalid.")
        return email

    @validates("nickname")
    def _validate_nickname(self, key: str, value: str | None) -> str | None:
        # Blank nicknames are stored as NULL
        return (value.strip() or None) if value is not None else None
