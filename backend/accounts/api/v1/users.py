"""Account endpoints: registration, session lifecycle and profile."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from accounts.api.deps import (
    REFRESH_COOKIE,
    api_response,
    clear_auth_cookies,
    current_user,
    get_account_service,
    get_channel_service,
    require_auth,
    set_auth_cookies,
    timing,
    uploaded_file,
)
from accounts.core.extensions import limiter
from accounts.schemas import (
    AccountDetailsSchema,
    ChangePasswordSchema,
    ChannelProfileSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
    WatchedVideoSchema,
)
from accounts.services import AccountDetailsIn, LoginIn, PasswordChangeIn, RegisterIn

bp = Blueprint("users", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
change_password_schema = ChangePasswordSchema()
account_details_schema = AccountDetailsSchema()
user_schema = UserSchema()
login_response_schema = LoginResponseSchema()
token_pair_schema = TokenPairSchema()
channel_schema = ChannelProfileSchema()
watched_video_schema = WatchedVideoSchema(many=True)


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


# ------------------------------ Public routes ------------------------------


@bp.post("/register")
@timing
def register():
    """Create an account from a multipart form with ``avatar`` and optional ``coverImage``."""

    data = register_schema.load(request.form.to_dict())
    user = get_account_service().register(
        RegisterIn(
            full_name=data["full_name"],
            last_name=data["last_name"],
            username=data["username"],
            email=data["email"],
            password=data["password"],
            avatar=uploaded_file("avatar"),
            cover_image=uploaded_file("coverImage"),
        )
    )
    return api_response(user_schema.dump(user), "User registered successfully", status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Verify credentials, set both token cookies and return them in the body."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_account_service().login(
        LoginIn(password=data["password"], email=data["email"], username=data["username"])
    )
    body = login_response_schema.dump(
        {
            "user": result.user,
            "access_token": result.tokens.access_token,
            "refresh_token": result.tokens.refresh_token,
        }
    )
    response = api_response(body, "User logged in successfully")
    return set_auth_cookies(response, result.tokens)


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token from the cookie or the ``refreshToken`` JSON field."""

    body = refresh_schema.load(request.get_json(silent=True) or {})
    presented = request.cookies.get(REFRESH_COOKIE) or body["refresh_token"]
    pair = get_account_service().refresh(presented)
    response = api_response(token_pair_schema.dump(pair), "Access token refreshed")
    return set_auth_cookies(response, pair)


# ---------------------------- Authenticated routes --------------------------


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke the stored refresh token and clear both cookies."""

    get_account_service().logout(current_user().id)
    return clear_auth_cookies(api_response({}, "User logged out"))


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    data = change_password_schema.load(request.get_json(silent=True) or {})
    get_account_service().change_password(
        current_user().id,
        PasswordChangeIn(old_password=data["old_password"], new_password=data["new_password"]),
    )
    return api_response({}, "Password changed successfully")


@bp.get("/current-user")
@require_auth
@timing
def get_current_user():
    return api_response(user_schema.dump(current_user()), "Current user fetched successfully")


@bp.patch("/update-account-details")
@require_auth
@timing
def update_account_details():
    data = account_details_schema.load(request.get_json(silent=True) or {})
    user = get_account_service().update_account_details(
        current_user().id,
        AccountDetailsIn(
            full_name=data["full_name"], email=data["email"], last_name=data["last_name"]
        ),
    )
    return api_response(user_schema.dump(user), "Account details updated successfully")


@bp.patch("/update-avatar")
@require_auth
@timing
def update_avatar():
    """Replace the avatar; the previous asset is deleted best effort."""

    user = get_account_service().update_avatar(current_user().id, uploaded_file("avatar"))
    return api_response(user_schema.dump(user), "Avatar image updated successfully")


@bp.patch("/update-cover-image")
@require_auth
@timing
def update_cover_image():
    user = get_account_service().update_cover_image(
        current_user().id, uploaded_file("coverImage")
    )
    return api_response(user_schema.dump(user), "Cover image updated successfully")


@bp.get("/c/<username>")
@require_auth
@timing
def channel_profile(username: str):
    """Public channel card of ``username`` as seen by the caller."""

    profile = get_channel_service().channel_profile(username, current_user().id)
    return api_response(channel_schema.dump(profile), "User channel fetched successfully")


@bp.get("/get-user-watch-history")
@bp.get("/watch-history")
@require_auth
@timing
def watch_history():
    """Videos the caller watched, in list order. Also served at ``/watch-history``."""

    videos = get_channel_service().watch_history(current_user().id)
    return api_response(watched_video_schema.dump(videos), "Watch history fetched successfully")
