"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, pre_load, validate

from .user import UserSchema


class _TrimmedInput(Schema):
    """Strip surrounding whitespace from every string value before loading."""

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def _strip_strings(self, data: Any, **kwargs: Any) -> Any:
        if not hasattr(data, "items"):
            return data
        return {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}


class RegisterSchema(_TrimmedInput):
    """Multipart form fields for account registration (files are read separately)."""

    full_name = fields.String(
        required=True, data_key="fullName", validate=validate.Length(min=1, max=100)
    )
    last_name = fields.String(
        required=True, data_key="lastName", validate=validate.Length(min=1, max=100)
    )
    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class LoginSchema(_TrimmedInput):
    """Credentials; the service requires at least one of ``email``/``username``."""

    email = fields.String(load_default=None, validate=validate.Length(max=254))
    username = fields.String(load_default=None, validate=validate.Length(max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshTokenSchema(_TrimmedInput):
    """Optional JSON body of the refresh endpoint (the cookie takes precedence)."""

    refresh_token = fields.String(load_default=None, data_key="refreshToken")


class TokenPairSchema(Schema):
    """Response payload carrying both tokens."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")


class LoginResponseSchema(Schema):
    """Response payload of a successful login."""

    user = fields.Nested(UserSchema, required=True)
    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")
