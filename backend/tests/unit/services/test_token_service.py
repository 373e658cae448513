# tests/unit/services/test_token_service.py
from __future__ import annotations

from datetime import timedelta

import pytest
from accounts.models.user import User
from accounts.services._shared.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    NotFoundError,
    TokenGenerationError,
)
from accounts.services.tokens import TokenPair, TokenService
from accounts.services.tokens.service import ROTATION_FAILED
from accounts.services.tokens.state import RefreshTokenState
from sqlalchemy.exc import OperationalError

from tests.factories.user import UserFactory


def _stored(session, user_id: int) -> str | None:
    session.expire_all()
    return session.get(User, user_id).refresh_token


# ------------------------------- Issue ------------------------------------ #
def test_issue_pair_stores_refresh_token(token_service, session):
    user = UserFactory()

    pair = token_service.issue_pair(user.id)

    assert isinstance(pair, TokenPair)
    assert pair.access_token.startswith("access.")
    assert pair.refresh_token.startswith("refresh.")
    assert _stored(session, user.id) == pair.refresh_token
    assert token_service.refresh_state(user.id) is RefreshTokenState.ACTIVE


def test_issue_pair_for_unknown_user_fails(token_service):
    with pytest.raises(TokenGenerationError):
        token_service.issue_pair(999)


def test_access_claims_carry_profile(token_service):
    user = UserFactory(username="alice", email="alice@example.com")
    pair = token_service.issue_pair(user.id)

    claims = token_service.verify_access(pair.access_token)

    assert claims.user_id == user.id
    assert claims.username == "alice"
    assert claims.email == "alice@example.com"
    assert claims.full_name == user.full_name
    assert claims.expires_at is not None


def test_reissue_supersedes_previous_refresh_token(token_service):
    user = UserFactory()
    first = token_service.issue_pair(user.id)
    second = token_service.issue_pair(user.id)

    with pytest.raises(InvalidTokenError):
        token_service.rotate(first.refresh_token)
    assert token_service.rotate(second.refresh_token).refresh_token != second.refresh_token


# ------------------------------- Verify ----------------------------------- #
def test_verify_access_rejects_expired(token_service, stub_tokens):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)
    stub_tokens.now += timedelta(minutes=16)

    with pytest.raises(ExpiredTokenError):
        token_service.verify_access(pair.access_token)


def test_verify_access_rejects_refresh_token(token_service):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)

    with pytest.raises(InvalidTokenError):
        token_service.verify_access(pair.refresh_token)


# ------------------------------- Rotate ----------------------------------- #
def test_rotate_replaces_stored_token(token_service, session):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)

    rotated = token_service.rotate(pair.refresh_token)

    assert rotated.refresh_token != pair.refresh_token
    assert rotated.access_token != pair.access_token
    assert _stored(session, user.id) == rotated.refresh_token


def test_rotated_token_cannot_be_reused(token_service):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)
    token_service.rotate(pair.refresh_token)

    with pytest.raises(InvalidTokenError) as exc:
        token_service.rotate(pair.refresh_token)
    assert exc.value.message == ROTATION_FAILED


def test_rotate_after_revoke_fails(token_service):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)
    token_service.revoke(user.id)

    with pytest.raises(InvalidTokenError) as exc:
        token_service.rotate(pair.refresh_token)
    assert exc.value.message == ROTATION_FAILED


def test_rotate_expired_refresh_token_fails_with_same_message(token_service, stub_tokens):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)
    stub_tokens.now += timedelta(days=11)

    with pytest.raises(InvalidTokenError) as exc:
        token_service.rotate(pair.refresh_token)
    assert exc.value.message == ROTATION_FAILED


@pytest.mark.parametrize("presented", ["", "garbage"])
def test_rotate_rejects_unknown_tokens(token_service, presented):
    with pytest.raises(InvalidTokenError):
        token_service.rotate(presented)


def test_rotate_rejects_access_token(token_service):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)

    with pytest.raises(InvalidTokenError):
        token_service.rotate(pair.access_token)


def test_rotate_losing_compare_and_swap_fails(token_service, session, monkeypatch):
    """A concurrent rotation landing between read and write makes this one lose."""
    user = UserFactory()
    pair = token_service.issue_pair(user.id)

    original = TokenService._current_refresh_token

    def racing_read(self, uow, user_id):
        result = original(self, uow, user_id)
        # Another request rotates first
        uow.users.store_refresh_token(user_id, "refresh.concurrent")
        return result

    monkeypatch.setattr(TokenService, "_current_refresh_token", racing_read)

    with pytest.raises(InvalidTokenError) as exc:
        token_service.rotate(pair.refresh_token)
    assert exc.value.message == ROTATION_FAILED


def test_rotate_database_failure_is_reported_as_rejection(token_service, session, monkeypatch):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)

    def broken_read(self, uow, user_id):
        raise OperationalError("SELECT refresh_token", {}, Exception("database is locked"))

    monkeypatch.setattr(TokenService, "_current_refresh_token", broken_read)

    with pytest.raises(InvalidTokenError) as exc:
        token_service.rotate(pair.refresh_token)
    assert exc.value.message == ROTATION_FAILED
    assert _stored(session, user.id) == pair.refresh_token


def test_rotate_for_deleted_user_fails(token_service, session):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)
    session.delete(session.get(User, user.id))
    session.commit()

    with pytest.raises(InvalidTokenError):
        token_service.rotate(pair.refresh_token)


# ------------------------------- Revoke ----------------------------------- #
def test_revoke_clears_stored_token(token_service, session):
    user = UserFactory()
    token_service.issue_pair(user.id)

    token_service.revoke(user.id)

    assert _stored(session, user.id) is None
    assert token_service.refresh_state(user.id) is RefreshTokenState.NONE


def test_revoke_without_session_is_a_no_op(token_service):
    user = UserFactory()
    token_service.revoke(user.id)
    assert token_service.refresh_state(user.id) is RefreshTokenState.NONE


def test_revoke_unknown_user(token_service):
    with pytest.raises(NotFoundError):
        token_service.revoke(12345)


def test_access_token_survives_revoke_until_expiry(token_service):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)
    token_service.revoke(user.id)

    assert token_service.verify_access(pair.access_token).user_id == user.id
