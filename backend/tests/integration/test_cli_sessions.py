"""``flask sessions`` command group."""

from __future__ import annotations

from accounts.models.user import User

from tests.factories.user import UserFactory


def test_status_and_revoke(runner, session):
    user = UserFactory(username="smith", refresh_token="stored-token")

    status = runner.invoke(args=["sessions", "status", "smith"])
    assert status.exit_code == 0
    assert "smith: active" in status.output

    revoke = runner.invoke(args=["sessions", "revoke", "SMITH"])
    assert revoke.exit_code == 0
    session.expire_all()
    assert session.get(User, user.id).refresh_token is None

    status = runner.invoke(args=["sessions", "status", "smith"])
    assert "smith: none" in status.output


def test_unknown_user(runner):
    result = runner.invoke(args=["sessions", "revoke", "ghost"])
    assert result.exit_code != 0
    assert "No user named 'ghost'" in result.output
