"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
)
from .channel import ChannelProfileSchema, VideoOwnerSchema, WatchedVideoSchema
from .user import AccountDetailsSchema, ChangePasswordSchema, UserSchema

__all__ = [
    "AccountDetailsSchema",
    "ChangePasswordSchema",
    "ChannelProfileSchema",
    "LoginResponseSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UserSchema",
    "VideoOwnerSchema",
    "WatchedVideoSchema",
]
