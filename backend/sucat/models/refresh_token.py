"""Persisted refresh token record, one row per identity."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sucat.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class RefreshToken(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    The single live refresh token of an identity.

    The ``email`` column references the user by value (no foreign key):
    deleting a user does not cascade here, the caller must destroy the
    record separately.

    Fields
    ------
    email : str
        Identity the token was issued to. Unique.
    token : str
        Signed refresh token string.
    expires_at : datetime
        Expiry copied from the token's ``exp`` claim (UTC).
    """

    __tablename__ = "refresh_tokens"
    __repr_fields__ = ("email", "expires_at")

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("email", name="uq_refresh_tokens_email"),)
