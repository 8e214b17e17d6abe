"""Column and repr mixins shared by the ORM models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class PKMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class TimestampMixin:
    """Database-managed, timezone-aware ``created_at``/``updated_at``."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ReprMixin:
    """``<Model id=1 field=...>`` built from ``__repr_fields__``.

    Never list secret columns (token strings, password hashes) there.
    """

    __repr_fields__: tuple[str, ...] = ()

    def __repr__(self) -> str:
        fields = " ".join(f"{f}={getattr(self, f, None)!r}" for f in self.__repr_fields__)
        head = f"<{type(self).__name__} id={getattr(self, 'id', None)}"
        return f"{head} {fields}>" if fields else f"{head}>"
