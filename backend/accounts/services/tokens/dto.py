# accounts/services/tokens/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from accounts.core.config import parse_duration

# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Signing keys and lifetimes for both token classes.

    :param access_secret: HMAC key for access tokens.
    :type access_secret: str
    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_secret: HMAC key for refresh tokens.
    :type refresh_secret: str
    :param refresh_ttl: Refresh token lifetime.
    :type refresh_ttl: timedelta
    :param algorithm: JWS algorithm shared by both token classes.
    :type algorithm: str
    :param issuer: ``iss`` claim stamped on and required from tokens.
    :type issuer: str | None
    """

    access_secret: str
    access_ttl: timedelta
    refresh_secret: str
    refresh_ttl: timedelta
    algorithm: str = "HS256"
    issuer: str | None = None

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks.
        return (
            f"TokenConfig(access_ttl={self.access_ttl!r}, refresh_ttl={self.refresh_ttl!r}, "
            f"algorithm={self.algorithm!r}, issuer={self.issuer!r})"
        )

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> TokenConfig:
        """
        Build the config from Flask settings.

        :param config: Mapping with ``ACCESS_TOKEN_SECRET``,
            ``ACCESS_TOKEN_EXPIRY``, ``REFRESH_TOKEN_SECRET``,
            ``REFRESH_TOKEN_EXPIRY`` and optionally ``JWT_ALGORITHM`` /
            ``JWT_ISSUER``.
        :raises ValueError: On a missing or placeholder secret, a shared
            secret, an unparsable or non-positive lifetime.
        """
        access_secret = str(config.get("ACCESS_TOKEN_SECRET") or "")
        refresh_secret = str(config.get("REFRESH_TOKEN_SECRET") or "")
        if not access_secret or not refresh_secret:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set.")
        if any(s.upper().startswith("CHANGE_ME") for s in (access_secret, refresh_secret)):
            raise ValueError("Token secrets still hold a placeholder value.")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must be signed with different secrets.")

        access_ttl = parse_duration(config.get("ACCESS_TOKEN_EXPIRY", "15m"))
        refresh_ttl = parse_duration(config.get("REFRESH_TOKEN_EXPIRY", "10d"))
        if access_ttl <= timedelta(0) or refresh_ttl <= timedelta(0):
            raise ValueError("Token lifetimes must be positive.")

        return cls(
            access_secret=access_secret,
            access_ttl=access_ttl,
            refresh_secret=refresh_secret,
            refresh_ttl=refresh_ttl,
            algorithm=str(config.get("JWT_ALGORITHM") or "HS256"),
            issuer=config.get("JWT_ISSUER") or None,
        )


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access and refresh tokens minted together.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT, the value now stored for the user.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """
    Verified access-token claims.

    :param user_id: Subject of the token.
    :param email: Email at issue time.
    :param username: Username at issue time.
    :param full_name: Display name at issue time.
    :param jti: Unique token id.
    :param expires_at: Expiry instant (UTC).
    """

    user_id: int
    email: str | None
    username: str | None
    full_name: str | None
    jti: str | None
    expires_at: datetime | None
