from __future__ import annotations

import pytest
from accounts.repositories import PUBLIC_COLUMNS, UserRepository

from tests.factories.user import UserFactory


@pytest.fixture()
def repo(session) -> UserRepository:
    return UserRepository(session=session)


class TestLookups:
    def test_get_by_username_is_case_insensitive(self, repo):
        user = UserFactory(username="dan")
        assert repo.get_by_username(" DAN ").id == user.id
        assert repo.get_by_username("nobody") is None

    def test_find_by_email_or_username(self, repo):
        a = UserFactory(email="a@example.com", username="aa")
        b = UserFactory(email="b@example.com", username="bb")
        assert repo.find_by_email_or_username(email="a@example.com").id == a.id
        assert repo.find_by_email_or_username(username="BB").id == b.id
        # Either key matching is enough; the lower id wins
        assert repo.find_by_email_or_username(email="b@example.com", username="aa").id == a.id
        assert repo.find_by_email_or_username(email="", username="  ") is None

    def test_email_taken_by_other(self, repo):
        a = UserFactory(email="a@example.com")
        b = UserFactory()
        assert repo.email_taken_by_other("A@example.com", b.id) is True
        assert repo.email_taken_by_other("a@example.com", a.id) is False

    def test_find_public_by_id_excludes_secrets(self, repo):
        user = UserFactory()
        row = repo.find_public_by_id(user.id)
        assert set(row) == {c.key for c in PUBLIC_COLUMNS}
        assert "password_hash" not in row
        assert "refresh_token" not in row
        assert repo.find_public_by_id(999) is None

    def test_unknown_filter_rejected(self, repo):
        with pytest.raises(ValueError):
            repo.find_one(password_hash="x")

    def test_unknown_update_field_rejected(self, repo):
        user = UserFactory()
        with pytest.raises(ValueError):
            repo.assign_updates(user, {"refresh_token": "x"})


class TestRefreshTokenColumn:
    def test_store_and_read(self, repo, session):
        user = UserFactory()
        assert repo.get_refresh_token(user.id) == (True, None)
        assert repo.store_refresh_token(user.id, "t1") is True
        assert repo.get_refresh_token(user.id) == (True, "t1")

    def test_unknown_user(self, repo):
        assert repo.get_refresh_token(42) == (False, None)
        assert repo.store_refresh_token(42, "t") is False
        assert repo.clear_refresh_token(42) is False

    def test_swap_only_matches_expected_value(self, repo):
        user = UserFactory()
        repo.store_refresh_token(user.id, "t1")

        assert repo.swap_refresh_token(user.id, expected="stale", replacement="t2") is False
        assert repo.get_refresh_token(user.id) == (True, "t1")

        assert repo.swap_refresh_token(user.id, expected="t1", replacement="t2") is True
        # A second swap of the same token loses
        assert repo.swap_refresh_token(user.id, expected="t1", replacement="t3") is False
        assert repo.get_refresh_token(user.id) == (True, "t2")

    def test_clear(self, repo):
        user = UserFactory()
        repo.store_refresh_token(user.id, "t1")
        assert repo.clear_refresh_token(user.id) is True
        assert repo.get_refresh_token(user.id) == (True, None)
