from __future__ import annotations

from datetime import timedelta

import pytest
from accounts.models.user import User
from accounts.services import SessionAuthenticator
from accounts.services._shared.errors import NotFoundError, UnauthorizedError
from accounts.services.session import bearer_token

from tests.factories.user import UserFactory


@pytest.fixture()
def authenticator(token_service) -> SessionAuthenticator:
    return SessionAuthenticator(token_service=token_service)


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc", "abc"),
        ("bearer   abc  ", "abc"),
        ("BEARER abc", "abc"),
        ("Basic abc", None),
        ("Bearer", None),
        ("", None),
        (None, None),
    ],
)
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected


def test_authenticates_with_cookie(authenticator, token_service):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)

    out = authenticator.authenticate(pair.access_token, None)

    assert out.id == user.id
    assert out.username == user.username


def test_authenticates_with_bearer_header(authenticator, token_service):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)

    assert authenticator.authenticate(None, f"Bearer {pair.access_token}").id == user.id


def test_cookie_wins_over_header(authenticator, token_service):
    cookie_user, header_user = UserFactory(), UserFactory()
    cookie_pair = token_service.issue_pair(cookie_user.id)
    header_pair = token_service.issue_pair(header_user.id)

    out = authenticator.authenticate(cookie_pair.access_token, f"Bearer {header_pair.access_token}")

    assert out.id == cookie_user.id


def test_missing_token(authenticator):
    with pytest.raises(UnauthorizedError) as exc:
        authenticator.authenticate(None, None)
    assert exc.value.message == "Unauthorized access"


def test_expired_token(authenticator, token_service, stub_tokens):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)
    stub_tokens.now += timedelta(hours=1)

    with pytest.raises(UnauthorizedError) as exc:
        authenticator.authenticate(pair.access_token, None)
    assert exc.value.message == "Token expired"


def test_refresh_token_is_not_an_access_token(authenticator, token_service):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)

    with pytest.raises(UnauthorizedError):
        authenticator.authenticate(pair.refresh_token, None)


def test_deleted_user(authenticator, token_service, session):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)
    session.delete(session.get(User, user.id))
    session.commit()

    with pytest.raises(NotFoundError) as exc:
        authenticator.authenticate(pair.access_token, None)
    assert str(exc.value) == "User not found"


def test_does_not_touch_refresh_state(authenticator, token_service, session):
    user = UserFactory()
    pair = token_service.issue_pair(user.id)

    authenticator.authenticate(pair.access_token, None)

    session.expire_all()
    assert session.get(User, user.id).refresh_token == pair.refresh_token
