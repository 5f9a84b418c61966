"""HTTP tests for /auth: register, login, refresh rotation, logout, me."""

from __future__ import annotations

import pytest
from freezegun import freeze_time

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.auth import API, bearer, login
from tests.helpers.envelope import assert_error


@pytest.fixture()
def user(session):
    u = UserFactory(email="ada@example.com", name="Ada")
    session.commit()
    return u


class TestRegister:
    def test_creates_user_without_secrets(self, client):
        resp = client.post(
            f"{API}/auth/register",
            json={"email": "new@example.com", "name": "Newbie", "password": "Str0ngPass"},
        )

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["email"] == "new@example.com"
        assert data["name"] == "Newbie"
        assert "password" not in data
        assert "password_hash" not in data
        assert "createdAt" in data

    def test_duplicate_email_conflicts(self, client, user):
        resp = client.post(
            f"{API}/auth/register",
            json={"email": "ada@example.com", "name": "Other", "password": "Str0ngPass"},
        )

        body = assert_error(resp, 409, "unique_constraint")
        assert body["message"] == "email already exists"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "weak@example.com", "name": "Weak", "password": "alllowercase1"},
            {"email": "weak@example.com", "name": "Weak", "password": "Sh0rt"},
            {"email": "not-an-email", "name": "Weak", "password": "Str0ngPass"},
            {"email": "weak@example.com", "name": "W", "password": "Str0ngPass"},
            {},
        ],
    )
    def test_rejects_invalid_payloads(self, client, payload):
        resp = client.post(f"{API}/auth/register", json=payload)

        body = assert_error(resp, 400, "validation_error")
        assert body["details"]["errors"]


class TestLogin:
    def test_returns_tokens_and_user(self, client, user):
        data = login(client, "ada@example.com")

        assert data["access_token"]
        assert data["refresh_token"]
        assert data["user"] == {"id": user.id, "email": "ada@example.com", "name": "Ada"}

    def test_wrong_password(self, client, user):
        resp = client.post(
            f"{API}/auth/login", json={"email": "ada@example.com", "password": "Wr0ngPass"}
        )

        body = assert_error(resp, 401, "invalid_credentials")
        assert body["message"] == "Invalid email or password"

    def test_unknown_email(self, client):
        resp = client.post(
            f"{API}/auth/login", json={"email": "ghost@example.com", "password": DEFAULT_PASSWORD}
        )

        assert_error(resp, 401, "invalid_credentials")


class TestRefreshAndLogout:
    def test_rotation_invalidates_previous_token(self, app_with_cache, client, user):
        first = login(client, "ada@example.com")

        resp = client.post(f"{API}/auth/refresh", json={"refresh_token": first["refresh_token"]})
        assert resp.status_code == 200
        rotated = resp.get_json()["data"]
        assert set(rotated) == {"access_token", "refresh_token"}
        assert rotated["refresh_token"] != first["refresh_token"]

        replay = client.post(f"{API}/auth/refresh", json={"refresh_token": first["refresh_token"]})
        assert_error(replay, 401, "token_expired")

    def test_logout_revokes_refresh_token(self, app_with_cache, client, user, fake_redis):
        tokens = login(client, "ada@example.com")
        assert fake_redis.get(f"refresh_token:{user.id}") == tokens["refresh_token"]

        resp = client.post(f"{API}/auth/logout", headers=bearer(tokens["access_token"]))
        assert resp.status_code == 200
        assert resp.get_json()["data"] == {"success": True}
        assert fake_redis.get(f"refresh_token:{user.id}") is None

        again = client.post(f"{API}/auth/logout", headers=bearer(tokens["access_token"]))
        assert again.status_code == 200

        refresh = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert_error(refresh, 401, "token_expired")

    def test_garbage_refresh_token(self, client):
        resp = client.post(f"{API}/auth/refresh", json={"refresh_token": "nope"})

        assert_error(resp, 401, "token_expired")

    def test_refresh_requires_token_field(self, client):
        assert_error(client.post(f"{API}/auth/refresh", json={}), 400, "validation_error")


class TestMe:
    def test_me(self, client, user):
        tokens = login(client, "ada@example.com")

        resp = client.get(f"{API}/auth/me", headers=bearer(tokens["access_token"]))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["id"] == user.id

    def test_missing_header(self, client):
        assert_error(client.get(f"{API}/auth/me"), 401, "token_invalid")

    def test_non_bearer_scheme(self, client):
        resp = client.get(f"{API}/auth/me", headers={"Authorization": "Basic abc"})

        assert_error(resp, 401, "token_invalid")

    def test_bad_token(self, client):
        resp = client.get(f"{API}/auth/me", headers=bearer("not.a.jwt"))

        body = assert_error(resp, 401, "invalid_credentials")
        assert body["message"] == "Invalid token"

    def test_refresh_token_is_not_an_access_token(self, client, user):
        tokens = login(client, "ada@example.com")

        resp = client.get(f"{API}/auth/me", headers=bearer(tokens["refresh_token"]))

        assert_error(resp, 401, "invalid_credentials")

    def test_expired_access_token(self, client, user):
        with freeze_time("2026-01-01 10:00:00"):
            tokens = login(client, "ada@example.com")

        with freeze_time("2026-01-01 10:16:00"):
            resp = client.get(f"{API}/auth/me", headers=bearer(tokens["access_token"]))

        assert_error(resp, 401, "token_expired")
