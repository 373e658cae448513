from __future__ import annotations

import pytest
from accounts.models.user import User
from sqlalchemy.exc import IntegrityError

from tests.factories.user import UserFactory


def test_email_and_username_are_normalized(session):
    user = UserFactory(email="  Mixed@Example.COM ", username=" Chan_One ")
    assert user.email == "mixed@example.com"
    assert user.username == "chan_one"


def test_password_is_hashed_and_write_only(session):
    user = UserFactory(password="s3cret")
    assert user.password_hash and user.password_hash != "s3cret"
    assert user.verify_password("s3cret") is True
    assert user.verify_password("nope") is False
    with pytest.raises(AttributeError):
        _ = user.password


def test_empty_password_rejected():
    with pytest.raises(ValueError):
        User().password = ""


@pytest.mark.parametrize("email", ["", "no-at-sign", "x@nodot"])
def test_invalid_email_rejected(email):
    with pytest.raises(ValueError):
        User(email=email)


def test_unique_username(session):
    UserFactory(username="taken")
    with pytest.raises(IntegrityError):
        UserFactory(username="TAKEN")
    session.rollback()


def test_cover_image_defaults_to_empty_string(session):
    user = User(
        email="c@example.com",
        username="cover",
        full_name="C",
        last_name="D",
        avatar="https://media.test/a.png",
    )
    user.password = "x"
    session.add(user)
    session.commit()
    assert user.cover_image == ""
    assert user.refresh_token is None


def test_repr_omits_secrets(session):
    user = UserFactory(password="hunter2")
    text = repr(user)
    assert user.username in text
    assert user.password_hash not in text
