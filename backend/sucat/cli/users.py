"""Flask CLI commands for managing chat accounts."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from sucat.core.logger import mask_identity
from sucat.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


@click.group("users")
def users_cli() -> None:
    """Account management commands."""


@users_cli.command("create")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--name", default=None, help="Real name.")
@click.option("--nickname", default=None, help="Public alias shown in chat rooms.")
@click.option("--department", default=None, help="Free-form affiliation.")
@with_appcontext
def create_user(
    email: str,
    password: str,
    name: str | None,
    nickname: str | None,
    department: str | None,
) -> None:
    """Create an account that can log in with EMAIL and the given password."""
    with SQLAlchemyUnitOfWork() as uow:
        if uow.users.exists_by_email(email):
            raise click.UsageError(f"A user with email {email!r} already exists.")
        try:
            user = uow.users.create(
                email=email,
                password=password,
                name=name,
                nickname=nickname,
                department=department,
            )
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="EMAIL / --password") from exc
        user_email = user.email

    LOGGER.info("users.created", extra={"identity": mask_identity(user_email)})
    click.echo(f"Created user {user_email}")
