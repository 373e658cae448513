# accounts/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from accounts.core import errors as api_errors
from accounts.services._shared.errors import (
    ConflictError,
    InternalError,
    MediaUploadError,
    NotFoundError,
    ServiceError,
    TokenError,
    UnauthorizedError,
    ValidationError,
)
from accounts.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services never touch the global session; always use a Unit of Work.
    - Services raise :class:`ServiceError` subclasses; the HTTP layer maps
      them with :func:`translate_exception`.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        :param ctx: Optional request-scoped context (auth, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=enforce_db_readonly)


def translate_exception(exc: ServiceError) -> api_errors.APIError:
    """
    Map domain/service-level errors to API-level (HTTP) errors.

    :param exc: Exception raised within the service layer.
    :returns: API error carrying the status code and client message.
    :rtype: accounts.core.errors.APIError
    """
    if isinstance(exc, ValidationError):
        errors = [{"field": k, "messages": v} for k, v in exc.errors.items()]
        return api_errors.BadRequest(exc.message, errors=errors)

    if isinstance(exc, MediaUploadError):
        return api_errors.BadRequest(str(exc))

    if isinstance(exc, UnauthorizedError | TokenError):
        return api_errors.Unauthorized(exc.message)

    if isinstance(exc, NotFoundError):
        return api_errors.NotFound(str(exc))

    if isinstance(exc, ConflictError):
        return api_errors.Conflict(str(exc))

    if isinstance(exc, InternalError):
        return api_errors.InternalServerError(exc.message)

    # Any other ServiceError subclass → 400 Bad Request
    return api_errors.BadRequest(str(exc))
