"""Unit tests for AuthService login/refresh/logout/verify."""

from __future__ import annotations

import jwt
import pytest
from freezegun import freeze_time

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from todo_api.services._shared.errors import (
    InvalidCredentialsError,
    TokenExpiredError,
)
from todo_api.services.auth.dto import LoginIn, RefreshIn
from todo_api.services.auth.service import AuthService


class TestAuthServiceWithCache:
    """Behaviour with the Redis-backed (fakeredis) refresh-token mirror."""

    @pytest.fixture()
    def service(self, make_token_service, redis_cache) -> AuthService:
        return AuthService(token_service=make_token_service(redis_cache))

    @pytest.fixture()
    def user(self):
        return UserFactory(email="ada@example.com", name="Ada")

    def test_login_returns_pair_and_public_user(self, service, user, token_config, fake_redis):
        out = service.login(LoginIn(email="ada@example.com", password=DEFAULT_PASSWORD))

        claims = jwt.decode(out.access_token, token_config.access_secret, algorithms=["HS256"])
        assert claims["email"] == "ada@example.com"
        assert claims["sub"] == str(user.id)
        assert out.user.id == user.id
        assert out.user.name == "Ada"
        assert fake_redis.get(f"refresh_token:{user.id}") == out.refresh_token

    def test_unknown_email_and_wrong_password_look_the_same(self, service, user):
        with pytest.raises(InvalidCredentialsError) as missing:
            service.login(LoginIn(email="nobody@example.com", password=DEFAULT_PASSWORD))
        with pytest.raises(InvalidCredentialsError) as wrong:
            service.login(LoginIn(email="ada@example.com", password="Wr0ngPassword"))

        assert str(missing.value) == str(wrong.value) == "Invalid email or password"

    def test_refresh_rotates_once(self, service, user):
        login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        rotated = service.refresh(RefreshIn(refresh_token=login.refresh_token))

        assert rotated.refresh_token != login.refresh_token
        with pytest.raises(TokenExpiredError):
            service.refresh(RefreshIn(refresh_token=login.refresh_token))
        # the new one still works
        service.refresh(RefreshIn(refresh_token=rotated.refresh_token))

    def test_refresh_token_cannot_be_rotated_twice(self, service, user, fake_redis):
        login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        claims = service.tokens.verify_refresh(login.refresh_token)

        # both requests passed verification before either rotated
        first = service.tokens.rotate_refresh(claims, login.refresh_token)
        with pytest.raises(TokenExpiredError):
            service.tokens.rotate_refresh(claims, login.refresh_token)

        assert fake_redis.get(f"refresh_token:{user.id}") == first.refresh_token

    def test_refresh_for_deleted_account_is_expired(self, service, user, session):
        login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        session.delete(user)
        session.flush()

        with pytest.raises(TokenExpiredError):
            service.refresh(RefreshIn(refresh_token=login.refresh_token))

    def test_logout_then_refresh_fails(self, service, user):
        login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        service.logout(user.id)
        service.logout(user.id)  # idempotent

        with pytest.raises(TokenExpiredError):
            service.refresh(RefreshIn(refresh_token=login.refresh_token))

    def test_refresh_with_garbage_is_expired(self, service):
        with pytest.raises(TokenExpiredError):
            service.refresh(RefreshIn(refresh_token="garbage"))

    def test_refresh_rejects_access_token(self, service, user):
        login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        with pytest.raises(TokenExpiredError):
            service.refresh(RefreshIn(refresh_token=login.access_token))

    def test_verify_token(self, service, user):
        login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        claims = service.verify_token(login.access_token)

        assert claims.user_id == user.id
        assert claims.email == user.email

    def test_verify_token_bad_signature_is_invalid_credentials(self, service, token_config):
        forged = jwt.encode(
            {"sub": "1", "email": "a@b.io", "exp": 4102444800}, "x" * 40, algorithm="HS256"
        )

        with pytest.raises(InvalidCredentialsError):
            service.verify_token(forged)

    def test_verify_token_expired(self, service, user):
        with freeze_time("2026-01-01 10:00:00"):
            login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        with freeze_time("2026-01-01 10:16:00"), pytest.raises(TokenExpiredError):
            service.verify_token(login.access_token)


class TestAuthServiceWithoutCache:
    """Cache disabled: signature and expiry are the only refresh checks."""

    @pytest.fixture()
    def service(self, make_token_service, null_cache) -> AuthService:
        return AuthService(token_service=make_token_service(null_cache))

    def test_old_refresh_token_still_accepted(self, service):
        user = UserFactory()
        login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        service.refresh(RefreshIn(refresh_token=login.refresh_token))
        again = service.refresh(RefreshIn(refresh_token=login.refresh_token))

        assert again.access_token

    def test_logout_is_a_noop(self, service):
        user = UserFactory()
        login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        service.logout(user.id)

        assert service.refresh(RefreshIn(refresh_token=login.refresh_token)).refresh_token

    def test_refresh_for_deleted_account_is_expired(self, service, session):
        user = UserFactory()
        login = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        session.delete(user)
        session.flush()

        with pytest.raises(TokenExpiredError):
            service.refresh(RefreshIn(refresh_token=login.refresh_token))
