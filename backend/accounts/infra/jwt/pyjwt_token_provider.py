# accounts/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from accounts.services._shared.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    MalformedTokenError,
    TokenGenerationError,
)
from accounts.services._shared.ports import TokenProvider
from accounts.services.tokens.dto import TokenConfig

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_REQUIRED_CLAIMS = ["exp", "iat", "sub", "type", "jti"]


@dataclass(slots=True)
class PyJWTTokenProvider(TokenProvider):
    """
    Adapter signing access and refresh tokens with PyJWT.

    Each token class has its own secret, so an access token never verifies
    as a refresh token and vice versa. Every token carries a random ``jti``;
    two tokens minted in the same second are still distinct.
    """

    config: TokenConfig

    def _encode(
        self,
        *,
        identity: int | str,
        token_type: str,
        secret: str,
        ttl: timedelta,
        additional_claims: dict[str, Any] | None = None,
    ) -> str:
        now = datetime.now(tz=UTC)
        payload: dict[str, Any] = dict(additional_claims or {})
        payload.update(
            {
                "sub": str(identity),
                "type": token_type,
                "iat": now,
                "exp": now + ttl,
                "jti": uuid.uuid4().hex,
            }
        )
        if self.config.issuer:
            payload["iss"] = self.config.issuer
        try:
            return jwt.encode(payload, secret, algorithm=self.config.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise TokenGenerationError() from exc

    def _decode(self, token: str, *, secret: str, token_type: str) -> dict[str, Any]:
        if not token or not token.strip():
            raise MalformedTokenError()
        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        # InvalidSignatureError subclasses DecodeError; check it first
        except jwt.InvalidSignatureError as exc:
            raise InvalidTokenError() from exc
        except jwt.DecodeError as exc:
            raise MalformedTokenError() from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc

        if claims.get("type") != token_type:
            raise InvalidTokenError("Wrong token type")
        return claims

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._encode(
            identity=identity,
            token_type=ACCESS_TOKEN_TYPE,
            secret=self.config.access_secret,
            ttl=expires_delta or self.config.access_ttl,
            additional_claims=additional_claims,
        )

    def create_refresh_token(
        self,
        *,
        identity: int | str,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._encode(
            identity=identity,
            token_type=REFRESH_TOKEN_TYPE,
            secret=self.config.refresh_secret,
            ttl=expires_delta or self.config.refresh_ttl,
        )

    def decode_access(self, token: str) -> dict[str, Any]:
        return self._decode(
            token, secret=self.config.access_secret, token_type=ACCESS_TOKEN_TYPE
        )

    def decode_refresh(self, token: str) -> dict[str, Any]:
        return self._decode(
            token, secret=self.config.refresh_secret, token_type=REFRESH_TOKEN_TYPE
        )
