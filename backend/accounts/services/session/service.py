# accounts/services/session/service.py
from __future__ import annotations

import logging

from accounts.services._shared.base import BaseService, ServiceContext
from accounts.services._shared.errors import NotFoundError, TokenError, UnauthorizedError
from accounts.services.accounts.dto import UserPublicOut
from accounts.services.tokens.service import TokenService

log = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def bearer_token(authorization: str | None) -> str | None:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    The scheme is matched case-insensitively. Any other shape yields ``None``.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        return None
    token = token.strip()
    return token or None


class SessionAuthenticator(BaseService):
    """
    Resolve the caller of a protected request from its access token.

    Read-only with respect to the refresh-token state: it never issues,
    rotates or revokes anything.
    """

    def __init__(self, *, token_service: TokenService, ctx: ServiceContext | None = None) -> None:
        super().__init__(ctx=ctx)
        self.tokens = token_service

    def authenticate(self, cookie_token: str | None, authorization: str | None) -> UserPublicOut:
        """
        Verify the presented access token and load its user.

        :param cookie_token: Value of the ``accessToken`` cookie; wins when
            both sources are present.
        :param authorization: Raw ``Authorization`` header.
        :returns: Public view of the authenticated user.
        :raises UnauthorizedError: No token, or the token failed verification
            (the message carries the reason).
        :raises NotFoundError: Token is valid but its user no longer exists.
        """
        token = (cookie_token or "").strip() or bearer_token(authorization)
        if not token:
            raise UnauthorizedError("Unauthorized access")

        try:
            claims = self.tokens.verify_access(token)
        except TokenError as exc:
            log.info("session.rejected", extra={"status": type(exc).__name__})
            raise UnauthorizedError(exc.message) from exc

        with self.ro_uow() as uow:
            row = uow.users.find_public_by_id(claims.user_id)
        if row is None:
            raise NotFoundError("User", claims.user_id, "User not found")
        return UserPublicOut.from_mapping(row)
