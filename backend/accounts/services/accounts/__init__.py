"""Account use cases: registration, login, logout, refresh and profile edits."""

from .dto import AccountDetailsIn, LoginIn, LoginOut, PasswordChangeIn, RegisterIn, UserPublicOut
from .service import AccountService

__all__ = [
    "AccountDetailsIn",
    "AccountService",
    "LoginIn",
    "LoginOut",
    "PasswordChangeIn",
    "RegisterIn",
    "UserPublicOut",
]
