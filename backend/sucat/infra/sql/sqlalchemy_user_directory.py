from __future__ import annotations

from collections.abc import Callable

from sucat.models.user import User
from sucat.services._shared.ports import UserDirectory
from sucat.uow import SQLAlchemyReadOnlyUnitOfWork


class SqlAlchemyUserDirectory(UserDirectory):
    """Resolve token identities against the ``users`` table.

    Each lookup runs in its own read-only Unit of Work; the returned entity
    stays attached to the request-scoped session.
    """

    def __init__(
        self,
        *,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._ro_uow = ro_uow_factory

    def find_by_email(self, email: str) -> User | None:
        with self._ro_uow() as uow:
            return uow.users.find_by_email(email)
