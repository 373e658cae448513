"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class UserSchema(Schema):
    """Public representation of a user; no password hash, no tokens."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    username = fields.String(required=True)
    full_name = fields.String(required=True, data_key="fullName")
    last_name = fields.String(required=True, data_key="lastName")
    avatar = fields.String(required=True)
    cover_image = fields.String(data_key="coverImage")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class ChangePasswordSchema(Schema):
    """Payload for changing the current user's password."""

    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(
        required=True, data_key="oldPassword", validate=validate.Length(min=1, max=128)
    )
    new_password = fields.String(
        required=True, data_key="newPassword", validate=validate.Length(min=1, max=128)
    )


class AccountDetailsSchema(Schema):
    """Payload for editing profile fields."""

    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(
        required=True, data_key="fullName", validate=validate.Length(min=1, max=100)
    )
    email = fields.Email(required=True, validate=validate.Length(max=254))
    last_name = fields.String(
        load_default=None, data_key="lastName", validate=validate.Length(min=1, max=100)
    )
