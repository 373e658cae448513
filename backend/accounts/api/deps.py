"""Shared API helpers: service wiring, auth guard, envelopes and cookies."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from accounts.core.extensions import get_media_uploader, get_token_config, get_token_provider
from accounts.core.logger import ensure_request_id
from accounts.services import (
    AccountService,
    ChannelService,
    ServiceContext,
    SessionAuthenticator,
    TokenPair,
    TokenService,
    UserPublicOut,
)
from accounts.services._shared.ports import MediaFile

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


# ------------------------------ Service wiring ------------------------------


def _ctx() -> ServiceContext:
    current = g.get("current_user")
    return ServiceContext(
        actor_id=current.id if current is not None else None,
        request_id=ensure_request_id(),
    )


def get_token_service() -> TokenService:
    """Return a token service bound to the current app's config and signer."""

    return TokenService(
        config=get_token_config(), token_provider=get_token_provider(), ctx=_ctx()
    )


def get_account_service() -> AccountService:
    return AccountService(
        token_service=get_token_service(), media_uploader=get_media_uploader(), ctx=_ctx()
    )


def get_channel_service() -> ChannelService:
    return ChannelService(ctx=_ctx())


# ------------------------------ Authentication ------------------------------


def require_auth(func: F) -> F:
    """Resolve the caller from the ``accessToken`` cookie or a bearer header.

    The authenticated public user is stored on ``flask.g.current_user``.
    Failures propagate as service errors and render as 401/404 envelopes.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        authenticator = SessionAuthenticator(token_service=get_token_service(), ctx=_ctx())
        g.current_user = authenticator.authenticate(
            request.cookies.get(ACCESS_COOKIE),
            request.headers.get("Authorization"),
        )
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user() -> UserPublicOut:
    """Return the user resolved by :func:`require_auth`."""

    return g.current_user


# ------------------------------ Request parsing -----------------------------


def uploaded_file(field: str) -> MediaFile | None:
    """Wrap ``request.files[field]`` as a :class:`MediaFile`; ``None`` if absent or empty."""

    storage = request.files.get(field)
    if storage is None or not storage.filename:
        return None
    return MediaFile(
        field=field,
        filename=storage.filename,
        stream=storage.stream,
        content_type=storage.mimetype or None,
    )


# --------------------------------- Responses --------------------------------


def api_response(data: Any = None, message: str = "Success", *, status: int = 200) -> Response:
    """Return the success envelope ``{statusCode, data, message, success}``."""

    response = jsonify(
        {
            "statusCode": status,
            "data": {} if data is None else data,
            "message": message,
            "success": status < 400,
        }
    )
    response.status_code = status
    return response


def _cookie_options() -> dict[str, Any]:
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("COOKIE_SECURE", True)),
        "samesite": current_app.config.get("COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }


def set_auth_cookies(response: Response, pair: TokenPair) -> Response:
    """Attach both tokens as HttpOnly cookies living as long as the tokens."""

    cfg = get_token_config()
    options = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE,
        pair.access_token,
        max_age=int(cfg.access_ttl.total_seconds()),
        **options,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        pair.refresh_token,
        max_age=int(cfg.refresh_ttl.total_seconds()),
        **options,
    )
    return response


def clear_auth_cookies(response: Response) -> Response:
    """Expire both token cookies."""

    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
