import pytest
from accounts.models.user import User
from accounts.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from accounts.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)

from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            user = UserFactory.build(password_hash="x")  # not persisted
            uow.session.add(user)
            uow.session.flush()
        uow.session.rollback()

    def test_allows_reads(self, app):
        UserFactory()
        with ROuow() as uow:
            assert uow.users.find_one(username=uow.users.get(1).username) is not None
            assert uow.session.query(User).count() == 1

    def test_disallows_commit(self, app):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_mutations_are_not_persisted(self, app, session):
        user = UserFactory(full_name="Before")

        with ROuow() as uow:
            uow.session.get(User, user.id).full_name = "After"

        session.expire_all()
        assert session.get(User, user.id).full_name == "Before"

    def test_listener_removed_on_exit(self, app, session):
        with ROuow():
            pass
        with RWuow() as uow:
            uow.users.add(UserFactory.build(password_hash="x"))
        assert session.query(User).count() == 1


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, app, session):
        with RWuow() as uow:
            user = uow.users.add(UserFactory.build(password_hash="x"))
            user_id = user.id
        session.expire_all()
        assert session.get(User, user_id) is not None

    def test_rolls_back_on_error(self, app, session):
        with pytest.raises(RuntimeError), RWuow() as uow:
            uow.users.add(UserFactory.build(password_hash="x"))
            raise RuntimeError("boom")
        assert session.query(User).count() == 0
