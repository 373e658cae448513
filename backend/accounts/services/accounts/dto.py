"""
DTOs for AccountService.

Data Transfer Objects isolate the service layer from ORM models and from
Flask request objects.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from accounts.services._shared.ports.media_store import MediaFile
from accounts.services.tokens.dto import TokenPair

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account registration.

    :param full_name: Display name.
    :param last_name: Family name.
    :param username: Channel handle (stored lower-cased).
    :param email: Login email.
    :param password: Raw password to be hashed by the model.
    :param avatar: Avatar file; required, checked by the service.
    :param cover_image: Optional cover image file.
    """

    full_name: str
    last_name: str
    username: str
    email: str
    password: str
    avatar: MediaFile | None = None
    cover_image: MediaFile | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login. At least one of ``email``/``username`` is required.

    :param password: Raw password.
    :param email: Login email.
    :param username: Channel handle.
    """

    password: str
    email: str | None = None
    username: str | None = None


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    :param old_password: Current password, verified before the change.
    :param new_password: Replacement password.
    """

    old_password: str
    new_password: str


@dataclass(frozen=True, slots=True)
class AccountDetailsIn:
    """
    Input DTO for profile edits.

    :param full_name: New display name.
    :param email: New login email.
    :param last_name: Optional new family name.
    """

    full_name: str
    email: str
    last_name: str | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe view of a user. Never carries the password hash or tokens.
    """

    id: int
    email: str
    username: str
    full_name: str
    last_name: str
    avatar: str
    cover_image: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> UserPublicOut:
        return cls(
            id=int(row["id"]),
            email=row["email"],
            username=row["username"],
            full_name=row["full_name"],
            last_name=row["last_name"],
            avatar=row["avatar"],
            cover_image=row.get("cover_image") or "",
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    :param user: Authenticated user.
    :param tokens: Freshly issued token pair.
    """

    user: UserPublicOut
    tokens: TokenPair
