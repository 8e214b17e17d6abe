"""Unit tests for AuthService login / refresh / logout flows."""

from __future__ import annotations

from datetime import timedelta

import pytest

from sucat.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from sucat.infra.sql.sqlalchemy_user_directory import SqlAlchemyUserDirectory
from sucat.services._shared.errors import (
    IdentityNotFoundError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
)
from sucat.services._shared.ports import InMemoryRefreshTokenStore
from sucat.services.auth import AuthService, LoginIn, RefreshIn
from sucat.services.token import TokenService, TokenSettings
from tests.factories.user import DEFAULT_PASSWORD, UserFactory

SECRET = "auth-service-secret-" + "a" * 48


@pytest.fixture()
def store(clock):
    return InMemoryRefreshTokenStore(clock=clock)


@pytest.fixture()
def tokens(store, clock):
    return TokenService(
        settings=TokenSettings(
            secret=SECRET,
            access_expires=timedelta(hours=1),
            refresh_expires=timedelta(days=14),
        ),
        codec=JWTTokenCodec(SECRET, clock=clock),
        users=SqlAlchemyUserDirectory(),
        refresh_store=store,
    )


@pytest.fixture()
def auth(tokens):
    return AuthService(tokens=tokens)


@pytest.fixture()
def user(session):
    return UserFactory(email="alice@example.com")


class TestLogin:
    def test_issues_pair_and_records_refresh(self, auth, tokens, store, user):
        logged_in, pair = auth.login(LoginIn(email="Alice@Example.com", password=DEFAULT_PASSWORD))

        assert logged_in.email == "alice@example.com"
        assert tokens.extract_email(pair.access_token) == "alice@example.com"
        assert store.find_by_identity("alice@example.com").token == pair.refresh_token

    def test_wrong_password(self, auth, store, user):
        with pytest.raises(InvalidCredentialsError):
            auth.login(LoginIn(email=user.email, password="nope"))
        assert len(store) == 0

    def test_unknown_email(self, auth):
        with pytest.raises(InvalidCredentialsError):
            auth.login(LoginIn(email="ghost@example.com", password=DEFAULT_PASSWORD))


class TestRefresh:
    def test_rotates_the_record(self, auth, store, user):
        _, first = auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        second = auth.refresh(RefreshIn(refresh_token=first.refresh_token))

        assert second.refresh_token != first.refresh_token
        assert store.find_by_identity(user.email).token == second.refresh_token

    def test_superseded_token_is_rejected(self, auth, user):
        _, first = auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        auth.refresh(RefreshIn(refresh_token=first.refresh_token))

        with pytest.raises(InvalidRefreshTokenError):
            auth.refresh(RefreshIn(refresh_token=first.refresh_token))

    def test_access_token_is_rejected(self, auth, user):
        _, pair = auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        with pytest.raises(InvalidRefreshTokenError):
            auth.refresh(RefreshIn(refresh_token=pair.access_token))

    def test_garbage_is_rejected(self, auth):
        with pytest.raises(InvalidRefreshTokenError):
            auth.refresh(RefreshIn(refresh_token="garbage-string"))

    def test_expired_refresh_token(self, auth, clock, user):
        _, pair = auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        clock.advance(days=14, seconds=1)

        with pytest.raises(InvalidRefreshTokenError):
            auth.refresh(RefreshIn(refresh_token=pair.refresh_token))

    def test_deleted_identity_destroys_record(self, auth, store, session, user):
        _, pair = auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        session.delete(user)
        session.flush()

        with pytest.raises(IdentityNotFoundError):
            auth.refresh(RefreshIn(refresh_token=pair.refresh_token))
        assert store.find_by_identity("alice@example.com") is None


class TestLogout:
    def test_revokes_refresh_token(self, auth, store, user):
        _, pair = auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        auth.logout(user)

        assert store.find_by_identity(user.email) is None
        with pytest.raises(InvalidRefreshTokenError):
            auth.refresh(RefreshIn(refresh_token=pair.refresh_token))
