# accounts/services/tokens/service.py
from __future__ import annotations

import hmac
import logging
from datetime import UTC, datetime
from typing import NoReturn

from sqlalchemy.exc import SQLAlchemyError

from accounts.models.user import User
from accounts.services._shared.base import BaseService, ServiceContext
from accounts.services._shared.errors import (
    InvalidTokenError,
    NotFoundError,
    TokenError,
    TokenGenerationError,
)
from accounts.services._shared.ports.token_provider import TokenProvider
from accounts.services.tokens.dto import AccessClaims, TokenConfig, TokenPair
from accounts.services.tokens.state import RefreshTokenState, Transition, next_state, state_of
from accounts.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

#: Single message for every rotation failure so callers cannot tell them apart.
ROTATION_FAILED = "Invalid or expired refresh token"


class TokenService(BaseService):
    """
    Session-token lifecycle: issue, verify, rotate and revoke.

    This service is the only writer of ``users.refresh_token``. Every write
    is checked against :mod:`accounts.services.tokens.state` first and is a
    single ``UPDATE``; rotation uses a compare-and-swap so that two
    concurrent rotations of one token cannot both succeed.

    Token values are never logged, only the user id.
    """

    def __init__(
        self,
        *,
        config: TokenConfig,
        token_provider: TokenProvider,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param config: Secrets and lifetimes for both token classes.
        :param token_provider: Adapter that signs and verifies JWTs.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.cfg = config
        self.tokens = token_provider

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def issue_pair(self, user_id: int) -> TokenPair:
        """
        Mint a fresh access/refresh pair and store the refresh token.

        Any previously stored refresh token stops rotating immediately.

        :param user_id: Owner of the new session.
        :returns: The minted pair.
        :raises TokenGenerationError: If the user cannot be loaded, signing
            fails, or the refresh token cannot be stored.
        """
        try:
            with self.rw_uow() as uow:
                user = uow.users.get(user_id)
                if user is None:
                    raise TokenGenerationError()
                next_state(state_of(user.refresh_token), Transition.ISSUE)
                pair = self._mint(user)
                if not uow.users.store_refresh_token(user.id, pair.refresh_token):
                    raise TokenGenerationError()
        except SQLAlchemyError as exc:
            log.error("token.issue_failed", extra={"user_id": user_id}, exc_info=True)
            raise TokenGenerationError() from exc

        log.info("token.issued", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def verify_access(self, token: str) -> AccessClaims:
        """
        Validate an access token.

        :param token: Encoded access JWT.
        :returns: Verified claims.
        :raises MalformedTokenError: Empty or unparsable token.
        :raises ExpiredTokenError: Token past its ``exp``.
        :raises InvalidTokenError: Bad signature, wrong type or bad subject.
        """
        claims = self.tokens.decode_access(token)
        exp = claims.get("exp")
        return AccessClaims(
            user_id=self._coerce_user_id(claims.get("sub")),
            email=claims.get("email"),
            username=claims.get("username"),
            full_name=claims.get("full_name"),
            jti=claims.get("jti"),
            expires_at=datetime.fromtimestamp(int(exp), tz=UTC) if exp is not None else None,
        )

    # ------------------------------------------------------------------ #
    # Rotate
    # ------------------------------------------------------------------ #

    def rotate(self, presented: str) -> TokenPair:
        """
        Exchange a stored refresh token for a new pair.

        Succeeds iff ``presented`` has a valid signature, is unexpired and
        equals the value stored for its user. The new refresh token replaces
        ``presented`` through a compare-and-swap; a lost race is reported
        like any other failure.

        :param presented: Refresh token sent by the client.
        :returns: The new pair.
        :raises InvalidTokenError: On every failure, with one message.
        """
        if not presented:
            raise InvalidTokenError(ROTATION_FAILED)
        try:
            claims = self.tokens.decode_refresh(presented)
            user_id = self._coerce_user_id(claims.get("sub"))
        except TokenError as exc:
            log.info("token.rotate_rejected", extra={"status": type(exc).__name__})
            raise InvalidTokenError(ROTATION_FAILED) from exc

        try:
            with self.rw_uow() as uow:
                found, stored = self._current_refresh_token(uow, user_id)
                if not found:
                    self._reject(user_id, "unknown_user")
                try:
                    next_state(state_of(stored), Transition.ROTATE)
                except InvalidTokenError:
                    self._reject(user_id, "no_active_session")
                if not hmac.compare_digest(str(stored).encode(), presented.encode()):
                    self._reject(user_id, "token_mismatch")

                user = uow.users.get(user_id)
                if user is None:
                    self._reject(user_id, "unknown_user")
                pair = self._mint(user)
                if not uow.users.swap_refresh_token(
                    user_id, expected=presented, replacement=pair.refresh_token
                ):
                    self._reject(user_id, "lost_race")
        except SQLAlchemyError as exc:
            log.error("token.rotate_failed", extra={"user_id": user_id}, exc_info=True)
            raise InvalidTokenError(ROTATION_FAILED) from exc

        log.info("token.rotated", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Revoke
    # ------------------------------------------------------------------ #

    def revoke(self, user_id: int) -> None:
        """
        Clear the stored refresh token (``* → NONE``).

        Access tokens already issued stay valid until they expire.

        :raises NotFoundError: If the user does not exist.
        """
        with self.rw_uow() as uow:
            found, stored = self._current_refresh_token(uow, user_id)
            if not found:
                raise NotFoundError("User", user_id)
            next_state(state_of(stored), Transition.REVOKE)
            uow.users.clear_refresh_token(user_id)
        log.info("token.revoked", extra={"user_id": user_id})

    def refresh_state(self, user_id: int) -> RefreshTokenState:
        """
        Report whether ``user_id`` currently has an active refresh token.

        :raises NotFoundError: If the user does not exist.
        """
        with self.ro_uow() as uow:
            found, stored = uow.users.get_refresh_token(user_id)
        if not found:
            raise NotFoundError("User", user_id)
        return state_of(stored)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _mint(self, user: User) -> TokenPair:
        access = self.tokens.create_access_token(
            identity=user.id,
            additional_claims={
                "email": user.email,
                "username": user.username,
                "full_name": user.full_name,
            },
            expires_delta=self.cfg.access_ttl,
        )
        refresh = self.tokens.create_refresh_token(
            identity=user.id,
            expires_delta=self.cfg.refresh_ttl,
        )
        return TokenPair(access_token=access, refresh_token=refresh)

    def _current_refresh_token(
        self, uow: SQLAlchemyUnitOfWork, user_id: int
    ) -> tuple[bool, str | None]:
        """Read the stored refresh token inside ``uow``."""
        return uow.users.get_refresh_token(user_id)

    @staticmethod
    def _reject(user_id: int, reason: str) -> NoReturn:
        log.info("token.rotate_rejected", extra={"user_id": user_id, "status": reason})
        raise InvalidTokenError(ROTATION_FAILED)

    @staticmethod
    def _coerce_user_id(subject: object) -> int:
        """Ensure the JWT subject can be treated as an integer user id."""
        if isinstance(subject, int) and not isinstance(subject, bool):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise InvalidTokenError("Invalid token subject")
