"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories,
adapters, and application services.

The translation to HTTP responses is handled by ``accounts/core/errors.py``
via :func:`accounts.services._shared.base.translate_exception`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email')
        or, for SQLite, the ``table.column`` pair it reports.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, adapters or domain logic.
    - The API layer translates them to ``APIError`` subclasses.
    """

    pass


# --------------------------------------------------------------------------- #
# Request / lookup errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """
    Raised when caller input is missing or malformed.

    :param message: Human-readable summary.
    :param errors: Optional per-field messages.
    """

    def __init__(self, message: str, errors: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or {}


class UnauthorizedError(ServiceError):
    """Raised when credentials or session tokens are rejected."""

    def __init__(self, message: str = "Unauthorized access") -> None:
        super().__init__(message)
        self.message = message


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    :param message: Optional client-facing message overriding the default.
    :type message: str | None
    """

    entity: str
    key: str | int
    message: str | None = None

    def __str__(self) -> str:
        return self.message or f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail


class InternalError(ServiceError):
    """Raised when an invariant the caller cannot fix is broken."""

    def __init__(self, message: str = "Something went wrong") -> None:
        super().__init__(message)
        self.message = message


# --------------------------------------------------------------------------- #
# Token errors
# --------------------------------------------------------------------------- #


class TokenError(ServiceError):
    """Base class for token verification failures."""

    default_message = "Invalid token"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MalformedTokenError(TokenError):
    """The token is empty or cannot be parsed."""

    default_message = "Malformed token"


class InvalidTokenError(TokenError):
    """Bad signature, wrong token type, or a refresh token no longer stored."""

    default_message = "Invalid token"


class ExpiredTokenError(TokenError):
    """The token's ``exp`` claim lies in the past."""

    default_message = "Token expired"


class TokenGenerationError(InternalError):
    """Signing or persisting a token pair failed."""

    def __init__(
        self, message: str = "Something went wrong while generating access and refresh tokens"
    ) -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Media errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class MediaUploadError(ServiceError):
    """
    Raised when the media host rejects or cannot receive an upload.

    :param field: Form field the file came from (``avatar``, ``coverImage``).
    :param reason: Adapter-level detail, kept out of client responses.
    """

    field: str
    reason: str = ""

    def __str__(self) -> str:
        return f"Error while uploading {self.field}"


@dataclass(slots=True)
class MediaDeleteError(ServiceError):
    """
    Raised when a previously uploaded asset cannot be removed.

    :param url: Stored URL of the asset.
    :param reason: Adapter-level detail.
    """

    url: str
    reason: str = ""

    def __str__(self) -> str:
        return f"Could not delete media asset: {self.reason or self.url}"
