"""
AccountService
==============

Application service behind the ``/users`` endpoints:

- Registration with avatar/cover upload.
- Login, logout and refresh (token work is delegated to ``TokenService``).
- Password change and profile edits, including avatar replacement.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from accounts.models.user import User
from accounts.services._shared.base import BaseService, ServiceContext
from accounts.services._shared.errors import (
    ConflictError,
    InternalError,
    MediaDeleteError,
    MediaUploadError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    violates,
)
from accounts.services._shared.ports.media_store import MediaFile, MediaUploader
from accounts.services.accounts.dto import (
    AccountDetailsIn,
    LoginIn,
    LoginOut,
    PasswordChangeIn,
    RegisterIn,
    UserPublicOut,
)
from accounts.services.tokens.dto import TokenPair
from accounts.services.tokens.service import TokenService
from accounts.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class AccountService(BaseService):
    """
    Orchestrates account use cases over the user repository, the token
    service and the media host.
    """

    def __init__(
        self,
        *,
        token_service: TokenService,
        media_uploader: MediaUploader,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.tokens = token_service
        self.media = media_uploader

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: RegisterIn) -> UserPublicOut:
        """
        Create an account after validating input and uploading its images.

        Order: field validation, uniqueness check, avatar presence, avatar
        upload, cover upload, insert. Nothing is uploaded or written when an
        earlier step fails; images already uploaded when a later step fails
        are deleted again, best effort.

        :raises ValidationError: Blank field, missing avatar or failed avatar upload.
        :raises ConflictError: Email or username already registered.
        :raises MediaUploadError: Cover image upload failed.
        :raises InternalError: The created user cannot be read back.
        """
        required = {
            "fullName": dto.full_name,
            "lastName": dto.last_name,
            "username": dto.username,
            "email": dto.email,
            "password": dto.password,
        }
        missing = {name: ["Field is required."] for name, value in required.items() if _blank(value)}
        if missing:
            raise ValidationError("All fields are required", errors=missing)

        with self.ro_uow() as uow:
            if uow.users.exists_by_email_or_username(email=dto.email, username=dto.username):
                raise ConflictError("User", "User with email or username already exists")

        if dto.avatar is None:
            raise ValidationError("Avatar file is required", errors={"avatar": ["Missing file."]})
        try:
            avatar = self.media.upload(dto.avatar)
        except MediaUploadError as exc:
            log.warning("media.upload_failed", extra={"status": exc.reason})
            raise ValidationError("Avatar file is required") from exc

        uploaded = [avatar.url]
        try:
            cover_url = ""
            if dto.cover_image is not None:
                cover_url = self.media.upload(dto.cover_image).url
                uploaded.append(cover_url)
            created = self._insert_user(dto, avatar_url=avatar.url, cover_url=cover_url)
        except Exception:
            self._discard_media(uploaded)
            raise

        if created is None:
            raise InternalError("Something went wrong while registering the user")
        log.info("account.registered", extra={"user_id": created["id"]})
        return UserPublicOut.from_mapping(created)

    # --------------------------------------------------------------------- #
    # Session lifecycle
    # --------------------------------------------------------------------- #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Verify credentials and issue a token pair.

        :raises ValidationError: Neither email nor username given.
        :raises NotFoundError: No such user.
        :raises UnauthorizedError: Wrong password.
        :raises TokenGenerationError: Token pair could not be issued.
        """
        if _blank(dto.email) and _blank(dto.username):
            raise ValidationError("username or email is required")

        with self.ro_uow() as uow:
            user = uow.users.find_by_email_or_username(email=dto.email, username=dto.username)
            if user is None:
                raise NotFoundError("User", dto.email or dto.username or "", "User does not exist")
            if not user.verify_password(dto.password):
                raise UnauthorizedError("Invalid user credentials")
            user_id = user.id

        pair = self.tokens.issue_pair(user_id)
        return LoginOut(user=self.current_user(user_id), tokens=pair)

    def logout(self, user_id: int) -> None:
        """Revoke the stored refresh token of ``user_id``."""
        self.tokens.revoke(user_id)

    def refresh(self, presented: str | None) -> TokenPair:
        """
        Rotate the presented refresh token.

        :raises UnauthorizedError: No token presented.
        :raises InvalidTokenError: Rotation refused.
        """
        if _blank(presented):
            raise UnauthorizedError("Unauthorized request")
        return self.tokens.rotate(presented.strip())

    # --------------------------------------------------------------------- #
    # Profile
    # --------------------------------------------------------------------- #

    def current_user(self, user_id: int) -> UserPublicOut:
        """:raises NotFoundError: If the user no longer exists."""
        with self.ro_uow() as uow:
            row = uow.users.find_public_by_id(user_id)
        if row is None:
            raise NotFoundError("User", user_id, "User not found")
        return UserPublicOut.from_mapping(row)

    def change_password(self, user_id: int, dto: PasswordChangeIn) -> None:
        """
        Replace the password after checking the old one.

        :raises ValidationError: Blank new password.
        :raises UnauthorizedError: Old password does not match.
        """
        if _blank(dto.new_password):
            raise ValidationError("New password is required")
        with self.rw_uow() as uow:
            user = self._load(uow, user_id)
            if not user.verify_password(dto.old_password):
                raise UnauthorizedError("Invalid old password")
            uow.users.update_password(user, dto.new_password)
        log.info("account.password_changed", extra={"user_id": user_id})

    def update_account_details(self, user_id: int, dto: AccountDetailsIn) -> UserPublicOut:
        """
        :raises ValidationError: Blank full name or email.
        :raises ConflictError: Email used by another account.
        """
        if _blank(dto.full_name) or _blank(dto.email):
            raise ValidationError("All fields are required")

        fields: dict[str, str] = {"full_name": dto.full_name.strip(), "email": dto.email}
        if not _blank(dto.last_name):
            fields["last_name"] = dto.last_name.strip()

        try:
            with self.rw_uow() as uow:
                if uow.users.email_taken_by_other(dto.email, user_id):
                    raise ConflictError("User", "Email is already in use")
                user = self._load(uow, user_id)
                uow.users.assign_updates(user, fields)
                row = uow.users.find_public_by_id(user_id)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        except IntegrityError as exc:
            if violates(exc, "email"):
                raise ConflictError("User", "Email is already in use") from exc
            raise
        return UserPublicOut.from_mapping(row)

    def update_avatar(self, user_id: int, media: MediaFile | None) -> UserPublicOut:
        """
        Upload a new avatar, store its URL, then delete the old asset.

        Deleting the old asset is best effort: a failure is logged and the
        call still succeeds.

        :raises ValidationError: No file given.
        :raises MediaUploadError: Upload failed; the stored avatar is unchanged.
        """
        if media is None:
            raise ValidationError("Avatar file is missing")
        uploaded = self.media.upload(media)

        with self.rw_uow() as uow:
            user = self._load(uow, user_id)
            previous = user.avatar
            uow.users.assign_updates(user, {"avatar": uploaded.url})
            row = uow.users.find_public_by_id(user_id)

        if previous and previous != uploaded.url:
            try:
                self.media.delete(previous)
            except MediaDeleteError as exc:
                log.warning("media.delete_failed", extra={"user_id": user_id, "status": exc.reason})
        return UserPublicOut.from_mapping(row)

    def update_cover_image(self, user_id: int, media: MediaFile | None) -> UserPublicOut:
        """
        :raises ValidationError: No file given.
        :raises MediaUploadError: Upload failed; the stored cover is unchanged.
        """
        if media is None:
            raise ValidationError("Cover image file is missing")
        uploaded = self.media.upload(media)

        with self.rw_uow() as uow:
            user = self._load(uow, user_id)
            uow.users.assign_updates(user, {"cover_image": uploaded.url})
            row = uow.users.find_public_by_id(user_id)
        return UserPublicOut.from_mapping(row)

    # --------------------------------------------------------------------- #
    # Utilities
    # --------------------------------------------------------------------- #

    def _insert_user(
        self, dto: RegisterIn, *, avatar_url: str, cover_url: str
    ) -> dict[str, Any] | None:
        try:
            with self.rw_uow() as uow:
                user = User(
                    full_name=dto.full_name.strip(),
                    last_name=dto.last_name.strip(),
                    username=dto.username,
                    email=dto.email,
                    avatar=avatar_url,
                    cover_image=cover_url,
                )
                user.password = dto.password
                uow.users.add(user)
                return uow.users.find_public_by_id(user.id)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        except IntegrityError as exc:
            # Lost a race with a concurrent registration
            if violates(exc, "email") or violates(exc, "username"):
                raise ConflictError("User", "User with email or username already exists") from exc
            raise

    def _discard_media(self, urls: list[str]) -> None:
        """Best-effort removal of assets uploaded by an aborted operation."""
        for url in urls:
            try:
                self.media.delete(url)
            except MediaDeleteError as exc:
                log.warning("media.delete_failed", extra={"status": exc.reason})

    @staticmethod
    def _load(uow: SQLAlchemyUnitOfWork | SQLAlchemyReadOnlyUnitOfWork, user_id: int) -> User:
        user = uow.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id, "User not found")
        return user
