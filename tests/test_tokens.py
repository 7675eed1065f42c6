"""Tests for utils.tokens.TokenService (issue / persist / rotate / revoke)."""

from datetime import timedelta

import jwt
import pytest

from models.user_store import UserNotFound
from utils.security import hash_password
from utils.tokens import InvalidToken, TokenPair, TokenService


def _decode(token, secret):
    return jwt.decode(token, secret, algorithms=["HS256"])


class TestIssue:
    """issue() is pure: it mints tokens and stores nothing."""

    @pytest.mark.parametrize("user_id", [1, 7, 123456])
    def test_both_tokens_carry_user_id(self, token_service, user_id):
        pair = token_service.issue(user_id)

        assert isinstance(pair, TokenPair)
        assert _decode(pair.access_token, "test_access")["userId"] == user_id
        assert _decode(pair.refresh_token, "test_refresh")["userId"] == user_id

    def test_tokens_use_distinct_keys(self, token_service):
        pair = token_service.issue(1)

        with pytest.raises(jwt.InvalidSignatureError):
            _decode(pair.access_token, "test_refresh")
        with pytest.raises(jwt.InvalidSignatureError):
            _decode(pair.refresh_token, "test_access")

    def test_expiry_windows(self, token_service):
        pair = token_service.issue(1)
        access = _decode(pair.access_token, "test_access")
        refresh = _decode(pair.refresh_token, "test_refresh")

        assert access["exp"] - access["iat"] == 15 * 60
        assert refresh["exp"] - refresh["iat"] == 7 * 24 * 60 * 60

    def test_issue_does_not_persist(self, token_service, user, users):
        token_service.issue(user.id)

        assert users.find_by_id(user.id).refresh_token is None

    def test_tokens_minted_back_to_back_differ(self, token_service):
        first = token_service.issue(1)
        second = token_service.issue(1)

        assert first.access_token != second.access_token
        assert first.refresh_token != second.refresh_token


class TestPersist:
    def test_persist_overwrites_stored_token(self, token_service, user, users):
        token_service.persist_refresh_token(user.id, "first")
        token_service.persist_refresh_token(user.id, "second")

        assert users.find_by_id(user.id).refresh_token == "second"

    def test_persist_for_unknown_user(self, token_service):
        with pytest.raises(UserNotFound):
            token_service.persist_refresh_token(999, "token")


class TestRotate:
    def test_rotate_returns_new_access_token(self, token_service, user):
        pair = token_service.issue_and_persist(user.id)

        access = token_service.rotate(pair.refresh_token)

        assert access != pair.access_token
        assert token_service.verify_access(access) == user.id

    def test_refresh_token_is_reusable(self, token_service, user, users):
        pair = token_service.issue_and_persist(user.id)

        token_service.rotate(pair.refresh_token)
        token_service.rotate(pair.refresh_token)

        assert users.find_by_id(user.id).refresh_token == pair.refresh_token

    def test_newer_login_supersedes_older_token(self, token_service, user):
        first = token_service.issue_and_persist(user.id)
        second = token_service.issue_and_persist(user.id)

        with pytest.raises(InvalidToken):
            token_service.rotate(first.refresh_token)
        assert token_service.rotate(second.refresh_token)

    def test_rotate_rejects_unpersisted_token(self, token_service, user):
        pair = token_service.issue(user.id)

        with pytest.raises(InvalidToken):
            token_service.rotate(pair.refresh_token)

    def test_rotate_rejects_expired_token(self, users, user):
        service = TokenService(
            users,
            access_secret="a",
            refresh_secret="r",
            access_expires=timedelta(minutes=15),
            refresh_expires=timedelta(seconds=-5),
        )
        pair = service.issue_and_persist(user.id)

        with pytest.raises(InvalidToken):
            service.rotate(pair.refresh_token)

    def test_rotate_rejects_access_token(self, token_service, user):
        pair = token_service.issue_and_persist(user.id)

        with pytest.raises(InvalidToken):
            token_service.rotate(pair.access_token)

    def test_rotate_rejects_foreign_signature(self, token_service, user, users):
        forged = jwt.encode({"userId": user.id, "exp": 4102444800}, "not-the-key", algorithm="HS256")
        users.update(user.id, refresh_token=forged)

        with pytest.raises(InvalidToken):
            token_service.rotate(forged)

    def test_rotate_rejects_unknown_user(self, token_service):
        pair = token_service.issue(42)

        with pytest.raises(InvalidToken):
            token_service.rotate(pair.refresh_token)

    @pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", None])
    def test_rotate_rejects_garbage(self, token_service, garbage):
        with pytest.raises(InvalidToken):
            token_service.rotate(garbage)

    def test_rotate_rejects_token_without_user_id(self, token_service):
        token = jwt.encode({"sub": "1", "exp": 4102444800}, "test_refresh", algorithm="HS256")

        with pytest.raises(InvalidToken):
            token_service.rotate(token)


class TestRevoke:
    def test_revoke_blocks_further_rotation(self, token_service, user, users):
        pair = token_service.issue_and_persist(user.id)

        token_service.revoke(pair.refresh_token)

        assert users.find_by_id(user.id).refresh_token is None
        with pytest.raises(InvalidToken):
            token_service.rotate(pair.refresh_token)

    def test_revoke_garbage_is_a_no_op(self, token_service, user, users):
        pair = token_service.issue_and_persist(user.id)

        token_service.revoke("garbage")

        assert users.find_by_id(user.id).refresh_token == pair.refresh_token

    def test_revoke_superseded_token_keeps_current_session(self, token_service, user, users):
        old = token_service.issue_and_persist(user.id)
        current = token_service.issue_and_persist(user.id)

        token_service.revoke(old.refresh_token)

        assert users.find_by_id(user.id).refresh_token == current.refresh_token
        assert token_service.rotate(current.refresh_token)

    def test_revoke_twice(self, token_service, user):
        pair = token_service.issue_and_persist(user.id)

        token_service.revoke(pair.refresh_token)
        token_service.revoke(pair.refresh_token)


class TestVerifyAccess:
    def test_valid_access_token(self, token_service):
        assert token_service.verify_access(token_service.issue(5).access_token) == 5

    def test_refresh_token_is_not_an_access_token(self, token_service):
        with pytest.raises(InvalidToken):
            token_service.verify_access(token_service.issue(5).refresh_token)


def test_register_rotate_revoke_scenario(token_service, users):
    """Register (id 1) -> refresh twice -> logout -> refresh fails."""
    user = users.create("bob@example.com", hash_password("hunter22"))
    assert user.id == 1

    a1, r1 = token_service.issue_and_persist(user.id)

    a2 = token_service.rotate(r1)
    assert a2 != a1
    assert token_service.rotate(r1)

    token_service.revoke(r1)
    with pytest.raises(InvalidToken):
        token_service.rotate(r1)


class TestSigningKeys:
    def test_shared_key_rejected(self, users):
        with pytest.raises(ValueError, match="must differ"):
            TokenService(
                users,
                access_secret="same",
                refresh_secret="same",
                access_expires=timedelta(minutes=15),
                refresh_expires=timedelta(days=7),
            )

    def test_app_refuses_to_start_with_shared_key(self, monkeypatch):
        from api import create_app
        from api.config import TestingConfig

        monkeypatch.setattr(TestingConfig, "REFRESH_TOKEN_SECRET", TestingConfig.ACCESS_TOKEN_SECRET)

        with pytest.raises(ValueError, match="must differ"):
            create_app("test")
