"""Tests for the ``flask users`` command group."""

from __future__ import annotations

from sucat.repositories.user import UserRepository
from tests.factories.user import UserFactory


def test_create_user(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(
        args=["users", "create", "Eve@Example.com", "--password", "pw123456", "--nickname", "eve"]
    )

    assert result.exit_code == 0, result.output
    assert "eve@example.com" in result.output
    user = UserRepository().find_by_email("eve@example.com")
    assert user.nickname == "eve"
    assert user.verify_password("pw123456")


def test_create_duplicate_user_fails(app, session):
    UserFactory(email="dup@example.com")
    runner = app.test_cli_runner()

    result = runner.invoke(args=["users", "create", "dup@example.com", "--password", "pw"])

    assert result.exit_code != 0
    assert "already exists" in result.output


def test_create_user_with_bad_email_fails(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["users", "create", "not-an-email", "--password", "pw"])

    assert result.exit_code != 0
