"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from accounts.core.extensions import db
from accounts.repositories import ChannelRepository, UserRepository
from accounts.uow.base import UnitOfWork

log = logging.getLogger(__name__)


def _block_flush(session, flush_context, instances) -> None:
    if session.new or session.dirty or session.deleted:
        raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.channels = ChannelRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Commits when the block exits cleanly, rolls back otherwise.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Owns a fresh transaction when the session is idle, else attaches to the
      one in progress.
    - Applies ``SET TRANSACTION READ ONLY`` on PostgreSQL and MySQL when it
      owns the transaction.
    - Blocks ORM flushes for the duration of the block.
    - Rolls back on exit only if it owns the transaction.
    - Disallows ``commit()``.
    """

    def __init__(self, *, enforce_db_readonly: bool = True) -> None:
        # Listeners go on the scope's concrete Session, not the shared factory.
        super().__init__(session=db.session())
        self.enforce_db_readonly = enforce_db_readonly
        self._txn: SessionTransaction | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn = None if self.session.in_transaction() else self.session.begin()
        event.listen(self.session, "before_flush", _block_flush)

        if self._txn is not None and self.enforce_db_readonly:
            dialect = self.session.get_bind().dialect.name
            if dialect in ("postgresql", "mysql", "mariadb"):
                try:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
                except SQLAlchemyError as exc:
                    log.warning("SET TRANSACTION READ ONLY failed (%s); flush guard only.", exc)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn is not None:
                self.session.rollback()
        finally:
            self._txn = None
            event.remove(self.session, "before_flush", _block_flush)

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
