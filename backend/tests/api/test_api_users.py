"""HTTP tests for /users."""

from __future__ import annotations

import pytest

from tests.factories.todo import TodoFactory
from tests.factories.user import UserFactory
from tests.helpers.auth import API, auth_headers, bearer, login
from tests.helpers.envelope import assert_error

USERS = f"{API}/users"


@pytest.fixture()
def me(session):
    u = UserFactory()
    session.commit()
    return u


@pytest.fixture()
def other(session):
    u = UserFactory()
    session.commit()
    return u


def test_list_users_with_meta(client, me, other):
    headers = auth_headers(client, me.email)

    body = client.get(f"{USERS}?limit=1", headers=headers).get_json()

    assert len(body["data"]) == 1
    assert body["meta"]["limit"] == 1
    assert body["meta"]["total"] >= 2
    assert body["meta"]["totalPages"] == body["meta"]["total"]


@pytest.mark.parametrize("qs", ["limit=101", "limit=0", "page=0"])
def test_list_users_rejects_out_of_range_paging(client, me, qs):
    headers = auth_headers(client, me.email)

    body = assert_error(client.get(f"{USERS}?{qs}", headers=headers), 400, "validation_error")

    assert body["details"]


def test_create_user(client, me):
    headers = auth_headers(client, me.email)

    resp = client.post(
        USERS,
        json={"email": "added@example.com", "name": "Added", "password": "Str0ngPass"},
        headers=headers,
    )

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["email"] == "added@example.com"
    assert "password_hash" not in data
    assert login(client, "added@example.com", "Str0ngPass")["access_token"]


def test_create_user_with_taken_email(client, me, other):
    headers = auth_headers(client, me.email)

    resp = client.post(
        USERS, json={"email": other.email, "name": "Clone", "password": "Str0ngPass"}, headers=headers
    )

    assert_error(resp, 409, "unique_constraint")


def test_create_user_requires_auth(client):
    resp = client.post(
        USERS, json={"email": "anon@example.com", "name": "Anon", "password": "Str0ngPass"}
    )

    assert_error(resp, 401, "token_invalid")


def test_get_user_and_missing(client, me, other):
    headers = auth_headers(client, me.email)

    data = client.get(f"{USERS}/{other.id}", headers=headers).get_json()["data"]
    assert data["email"] == other.email
    assert "password_hash" not in data

    assert_error(client.get(f"{USERS}/999999", headers=headers), 404, "not_found")


def test_update_own_profile(client, me):
    headers = auth_headers(client, me.email)

    resp = client.patch(f"{USERS}/{me.id}", json={"name": "Renamed"}, headers=headers)

    assert resp.status_code == 200
    assert resp.get_json()["data"]["name"] == "Renamed"


def test_update_password_then_login(client, me):
    headers = auth_headers(client, me.email)

    resp = client.patch(f"{USERS}/{me.id}", json={"password": "An0therPass"}, headers=headers)

    assert resp.status_code == 200
    assert login(client, me.email, "An0therPass")["access_token"]


def test_update_requires_a_field(client, me):
    headers = auth_headers(client, me.email)

    assert_error(client.patch(f"{USERS}/{me.id}", json={}, headers=headers), 400, "validation_error")


def test_update_email_taken(client, me, other):
    headers = auth_headers(client, me.email)

    resp = client.patch(f"{USERS}/{me.id}", json={"email": other.email}, headers=headers)

    assert_error(resp, 409, "unique_constraint")


def test_cannot_touch_another_account(client, me, other):
    headers = auth_headers(client, me.email)

    patched = client.patch(f"{USERS}/{other.id}", json={"name": "Hijacked"}, headers=headers)
    deleted = client.delete(f"{USERS}/{other.id}", headers=headers)

    assert_error(patched, 403, "forbidden")
    assert_error(deleted, 403, "forbidden")


def test_delete_own_account(client, me, session):
    TodoFactory(user=me)
    session.commit()
    email, user_id = me.email, me.id
    headers = auth_headers(client, email)

    resp = client.delete(f"{USERS}/{user_id}", headers=headers)

    assert resp.status_code == 204
    assert_error(client.get(f"{API}/auth/me", headers=headers), 404, "not_found")
    resp = client.post(f"{API}/auth/login", json={"email": email, "password": "Passw0rd!"})
    assert_error(resp, 401, "invalid_credentials")


def test_deleted_account_tokens_stop_working(client, me):
    tokens = login(client, me.email)
    headers = bearer(tokens["access_token"])
    assert client.delete(f"{USERS}/{me.id}", headers=headers).status_code == 204

    created = client.post(f"{API}/todos", json={"title": "Orphan"}, headers=headers)
    refreshed = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert_error(created, 404, "not_found")
    assert_error(refreshed, 401, "token_expired")
