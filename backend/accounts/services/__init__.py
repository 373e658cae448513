"""Service layer public API.

Callers import from :mod:`accounts.services` without knowing the internal
layout.

Re-exports
----------
- Base primitives: :class:`BaseService`, :class:`ServiceContext`
- :class:`TokenService` and its DTOs (:class:`TokenConfig`, :class:`TokenPair`,
  :class:`AccessClaims`)
- :class:`SessionAuthenticator`
- :class:`AccountService` and its DTOs
- :class:`ChannelService` and its DTOs
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from .accounts import (
    AccountDetailsIn,
    AccountService,
    LoginIn,
    LoginOut,
    PasswordChangeIn,
    RegisterIn,
    UserPublicOut,
)
from .channels import ChannelProfileOut, ChannelService, VideoOwnerOut, WatchedVideoOut
from .session import SessionAuthenticator
from .tokens import AccessClaims, TokenConfig, TokenPair, TokenService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Tokens
    "TokenService",
    "TokenConfig",
    "TokenPair",
    "AccessClaims",
    # Session
    "SessionAuthenticator",
    # Accounts
    "AccountService",
    "RegisterIn",
    "LoginIn",
    "LoginOut",
    "PasswordChangeIn",
    "AccountDetailsIn",
    "UserPublicOut",
    # Channels
    "ChannelService",
    "ChannelProfileOut",
    "WatchedVideoOut",
    "VideoOwnerOut",
]
