"""User repository: credential lookups and refresh-token field transitions."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import or_, select, update

from accounts.models.user import User
from accounts.repositories.base import BaseRepository

#: Columns safe to return to clients and other users.
PUBLIC_COLUMNS = (
    User.id,
    User.email,
    User.username,
    User.full_name,
    User.last_name,
    User.avatar,
    User.cover_image,
    User.created_at,
    User.updated_at,
)


def _norm(value: str) -> str:
    return value.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Token columns are written only through :meth:`store_refresh_token`,
    :meth:`swap_refresh_token` and :meth:`clear_refresh_token`, each a
    single ``UPDATE`` statement, so the ORM never races with them.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _filterable_fields(self):
        return {"id": User.id, "username": User.username}

    def _updatable_fields(self):
        """Profile fields a user may change (not password or tokens)."""
        return {"email", "full_name", "last_name", "avatar", "cover_image"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by channel handle (case-insensitive)."""
        return self.find_one(username=_norm(username))

    def find_by_email_or_username(
        self, *, email: str | None = None, username: str | None = None
    ) -> User | None:
        """Return the first user matching ``email`` OR ``username``.

        :param email: Email to match, ignored when blank.
        :param username: Username to match, ignored when blank.
        :returns: Matching user or ``None`` (also when both keys are blank).
        :rtype: User | None
        """
        clauses = []
        if email and email.strip():
            clauses.append(User.email == _norm(email))
        if username and username.strip():
            clauses.append(User.username == _norm(username))
        if not clauses:
            return None
        stmt = select(User).where(or_(*clauses)).order_by(User.id)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email_or_username(self, *, email: str, username: str) -> bool:
        return self.find_by_email_or_username(email=email, username=username) is not None

    def email_taken_by_other(self, email: str, user_id: int) -> bool:
        """Return ``True`` when ``email`` belongs to a user other than ``user_id``."""
        stmt = select(User.id).where(User.email == _norm(email), User.id != user_id)
        return self.session.execute(stmt).first() is not None

    def find_public_by_id(self, user_id: int) -> dict[str, Any] | None:
        """Return the public projection of a user as a plain mapping.

        Selects :data:`PUBLIC_COLUMNS` only, so the password hash and the
        refresh token never leave the database for this read.
        """
        row = self.session.execute(select(*PUBLIC_COLUMNS).where(User.id == user_id)).first()
        return dict(row._mapping) if row is not None else None

    # ---------------------------- Password ops ----------------------------

    def update_password(self, user: User, new_password: str) -> None:
        """Hash ``new_password`` onto ``user`` and flush."""
        user.password = new_password  # invokes setter → hash
        self.flush()

    # ---------------------------- Refresh token ----------------------------

    def get_refresh_token(self, user_id: int) -> tuple[bool, str | None]:
        """Read the stored refresh token straight from the row.

        :returns: ``(found, token)``; ``found`` is ``False`` for unknown ids.
        """
        row = self.session.execute(select(User.refresh_token).where(User.id == user_id)).first()
        if row is None:
            return False, None
        return True, row[0]

    def store_refresh_token(self, user_id: int, token: str) -> bool:
        """Overwrite the stored refresh token unconditionally.

        :returns: ``True`` when a row was updated.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(refresh_token=token)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def swap_refresh_token(self, user_id: int, *, expected: str, replacement: str) -> bool:
        """Compare-and-swap the stored refresh token.

        Issues ``UPDATE users SET refresh_token=:replacement WHERE id=:id AND
        refresh_token=:expected``. Two concurrent swaps of the same
        ``expected`` value cannot both match a row.

        :returns: ``True`` if this call replaced ``expected``; ``False`` when
            the stored value had already changed (or was never ``expected``).
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=replacement)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def clear_refresh_token(self, user_id: int) -> bool:
        """Set the stored refresh token to ``NULL``.

        :returns: ``True`` when the user row exists.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(refresh_token=None)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1
