from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from accounts.services._shared.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    MalformedTokenError,
)


class TokenProvider(Protocol):
    """Port for signing and verifying access and refresh tokens.

    ``decode_*`` raise :class:`MalformedTokenError`, :class:`ExpiredTokenError`
    or :class:`InvalidTokenError` and never return partial claims.
    """

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: int | str,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode_access(self, token: str) -> dict[str, Any]: ...

    def decode_refresh(self, token: str) -> dict[str, Any]: ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests.

    Tokens are opaque strings; ``now`` can be moved forward to expire them.
    """

    def __init__(self) -> None:
        self.now = datetime.now(tz=UTC)
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def _mk(
        self,
        *,
        identity: int | str,
        ttype: str,
        exp_delta: timedelta,
        additional_claims: dict[str, Any] | None = None,
    ) -> str:
        self._seq += 1
        token = f"{ttype}.{identity}.{self._seq}"
        payload: dict[str, Any] = {
            "sub": str(identity),
            "type": ttype,
            "jti": f"jti-{self._seq}",
            "iat": int(self.now.timestamp()),
            "exp": int((self.now + exp_delta).timestamp()),
        }
        if additional_claims:
            payload.update(additional_claims)
        self._issued[token] = payload
        return token

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="access",
            exp_delta=expires_delta or timedelta(minutes=15),
            additional_claims=additional_claims,
        )

    def create_refresh_token(
        self,
        *,
        identity: int | str,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="refresh",
            exp_delta=expires_delta or timedelta(days=10),
        )

    def _decode(self, token: str, expected_type: str) -> dict[str, Any]:
        if not token:
            raise MalformedTokenError()
        payload = self._issued.get(token)
        if payload is None:
            raise InvalidTokenError()
        if payload["exp"] <= int(self.now.timestamp()):
            raise ExpiredTokenError()
        if payload["type"] != expected_type:
            raise InvalidTokenError()
        return dict(payload)

    def decode_access(self, token: str) -> dict[str, Any]:
        return self._decode(token, "access")

    def decode_refresh(self, token: str) -> dict[str, Any]:
        return self._decode(token, "refresh")
