"""Integration tests for the authentication endpoints."""

from __future__ import annotations

import pytest

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.http import ACCESS_HEADER, REFRESH_HEADER, bearer, refresh_bearer


@pytest.fixture()
def user(session):
    return UserFactory(email="alice@example.com", nickname="alice")


def _login(client, email="alice@example.com", password=DEFAULT_PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


class TestLogin:
    def test_returns_raw_tokens_in_headers(self, client, user):
        resp = _login(client)

        assert resp.status_code == 200
        assert resp.get_json() == {"data": {"email": "alice@example.com"}}
        assert resp.headers[ACCESS_HEADER]
        assert not resp.headers[ACCESS_HEADER].startswith("Bearer ")
        assert resp.headers[REFRESH_HEADER]
        assert resp.headers["X-Request-ID"]

    def test_wrong_password_is_problem_401(self, client, user):
        resp = _login(client, password="wrong-password")

        assert resp.status_code == 401
        assert resp.mimetype == "application/problem+json"
        assert resp.get_json()["code"] == "invalid_credentials"

    def test_invalid_payload_is_422(self, client):
        resp = client.post("/api/v1/auth/login", json={"email": "not-an-email"})

        assert resp.status_code == 422
        assert resp.get_json()["code"] == "validation_error"


class TestMe:
    def test_returns_profile(self, client, user):
        access = _login(client).headers[ACCESS_HEADER]

        resp = client.get("/api/v1/auth/me", headers=bearer(access))

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["email"] == "alice@example.com"
        assert data["nickname"] == "alice"
        assert data["role"] == "USER"
        assert "password_hash" not in data

    def test_missing_token(self, client):
        resp = client.get("/api/v1/auth/me")

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_access_token"

    def test_unprefixed_token_counts_as_missing(self, client, user):
        access = _login(client).headers[ACCESS_HEADER]

        resp = client.get("/api/v1/auth/me", headers={ACCESS_HEADER: access})

        assert resp.get_json()["code"] == "invalid_access_token"

    def test_garbage_token(self, client):
        resp = client.get("/api/v1/auth/me", headers=bearer("garbage-string"))

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_token"
        assert resp.headers["WWW-Authenticate"] == 'Bearer error="invalid_token"'

    def test_expired_token(self, client, user, freeze_time):
        with freeze_time("2024-01-01T00:00:00Z"):
            access = _login(client).headers[ACCESS_HEADER]
        with freeze_time("2024-01-01T01:00:01Z"):
            resp = client.get("/api/v1/auth/me", headers=bearer(access))

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_token"

    def test_refresh_token_in_access_header(self, client, user):
        refresh = _login(client).headers[REFRESH_HEADER]

        resp = client.get("/api/v1/auth/me", headers=bearer(refresh))

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_access_token"


class TestRefresh:
    def test_rotates_pair(self, client, user):
        first = _login(client).headers[REFRESH_HEADER]

        resp = client.post("/api/v1/auth/refresh", headers=refresh_bearer(first))

        assert resp.status_code == 200
        second = resp.headers[REFRESH_HEADER]
        assert second != first
        assert resp.headers[ACCESS_HEADER]

        replay = client.post("/api/v1/auth/refresh", headers=refresh_bearer(first))
        assert replay.status_code == 401
        assert replay.get_json()["code"] == "invalid_refresh_token"

    def test_missing_header(self, client):
        resp = client.post("/api/v1/auth/refresh")

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_refresh_token"

    def test_access_token_in_refresh_header(self, client, user):
        access = _login(client).headers[ACCESS_HEADER]

        resp = client.post("/api/v1/auth/refresh", headers=refresh_bearer(access))

        assert resp.status_code == 401


class TestLogout:
    def test_revokes_refresh_token(self, client, user):
        login = _login(client)
        access, refresh = login.headers[ACCESS_HEADER], login.headers[REFRESH_HEADER]

        resp = client.post("/api/v1/auth/logout", headers=bearer(access))
        assert resp.status_code == 204

        resp = client.post("/api/v1/auth/refresh", headers=refresh_bearer(refresh))
        assert resp.status_code == 401

    def test_requires_access_token(self, client):
        assert client.post("/api/v1/auth/logout").status_code == 401
